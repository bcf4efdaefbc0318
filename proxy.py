#!/usr/bin/env python3

import json
import os
import requests
import structlog
import sys

from dataclasses import dataclass

__version__ = "1.0.0"

KAITO_URL = "https://api.kaito.ai/api/v1/yaps"
USER_AGENT = f"kaito-yaps-proxy/{__version__}"
TIMEOUT = float(os.environ.get("TIMEOUT", 10))

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET",
    "Access-Control-Allow-Headers": "Content-Type",
}

JSON_HEADERS = {**CORS_HEADERS, "Content-Type": "application/json; charset=utf-8"}

log = structlog.get_logger()

def configure_logging():
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
    )

@dataclass(frozen=True)
class Query:
    username: str | None = None
    user_id: str | None = None

    @classmethod
    def from_params(cls, params):
        # Anything but the two known keys is ignored.
        return cls(username=params.get("username") or None,
                   user_id=params.get("user_id") or None)

    def __bool__(self):
        return bool(self.username or self.user_id)

    def to_params(self):
        params = {}
        if self.username:
            params["username"] = self.username
        if self.user_id:
            params["user_id"] = self.user_id
        return params

def fetch(query):
    return requests.get(KAITO_URL,
                        params=query.to_params(),
                        headers={"Content-Type": "application/json",
                                 "User-Agent": USER_AGENT},
                        timeout=TIMEOUT)

def dumps(data):
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))

def error(status_code, message):
    return status_code, dict(JSON_HEADERS), dumps({"error": message})

def handle(method, params):
    """Return status code, headers and body for one proxied request."""
    method = method.upper()
    if method == "OPTIONS":
        return 200, dict(CORS_HEADERS), ""
    if method != "GET":
        return error(405, "Method not allowed")
    try:
        if not (query := Query.from_params(params)):
            return error(400, "username or user_id required")
        response = fetch(query)
        if not 200 <= response.status_code < 300:
            log.error("upstream_error", status=response.status_code, reason=response.reason)
            return error(502, "Upstream error")
        body = dumps(response.json())
    except Exception:
        log.exception("proxy_error")
        return error(500, "Internal server error")
    return 200, dict(JSON_HEADERS), body

def get_method(event):
    if method := event.get("httpMethod"):
        return method
    return event.get("requestContext", {}).get("http", {}).get("method", "GET")

def response(status_code, headers, body):
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": body,
    }

def lambda_handler(event, context):
    params = event.get("queryStringParameters") or {}
    return response(*handle(get_method(event), params))

configure_logging()

if __name__ == "__main__":
    upstream = fetch(Query(username=sys.argv[1]))
    upstream.raise_for_status()
    print(dumps(upstream.json()))
