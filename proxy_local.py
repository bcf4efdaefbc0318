#!/usr/bin/env python3

import os
import proxy
import signal

from http.server import BaseHTTPRequestHandler
from http.server import ThreadingHTTPServer
from urllib.parse import parse_qs
from urllib.parse import urlsplit

HOST = os.environ.get("HOST", "127.0.0.1")
PORT = int(os.environ.get("PORT", 3000))

class Handler(BaseHTTPRequestHandler):

    def respond(self):
        params = parse_qs(urlsplit(self.path).query)
        params = {k: v[0] for k, v in params.items()}
        status_code, headers, body = proxy.handle(self.command, params)
        body = body.encode("utf-8")
        self.send_response(status_code)
        for name, value in headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    do_DELETE = respond
    do_GET = respond
    do_HEAD = respond
    do_OPTIONS = respond
    do_PATCH = respond
    do_POST = respond
    do_PUT = respond

    def log_message(self, format, *args):
        proxy.log.info("request", client=self.address_string(), message=format % args)

def serve(host=HOST, port=PORT):
    server = ThreadingHTTPServer((host, port), Handler)
    # Let SIGTERM unwind the same way as Ctrl+C.
    signal.signal(signal.SIGTERM, signal.default_int_handler)
    print(f"Starting proxy at http://{host}:{port}/api/kaito-yaps-proxy")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("Shutting down proxy")
    finally:
        server.server_close()

if __name__ == "__main__":
    serve()
