"""Serverless entry point for every /api/* request.

The runtime routes all paths here; ``router.Gateway`` decides between
POST /api/chat, GET /api/search, CORS preflight, and 404. Run this file
directly for a local threaded development server.
"""

from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import get_config
from errors import ValidationError
from router import Response, build_gateway, error_response


def default_gateway():
    return build_gateway(get_config())


class handler(BaseHTTPRequestHandler):
    """HTTP adapter that hands each request to the gateway router."""
    gateway_factory = staticmethod(default_gateway)

    def _read_body(self) -> bytes:
        raw = (self.headers.get("Content-Length") or "0").strip()
        try:
            length = int(raw)
        except ValueError:
            raise ValidationError("Invalid Content-Length header") from None
        if length < 0:
            raise ValidationError("Invalid Content-Length header")
        return self.rfile.read(length) if length else b""

    def _dispatch(self) -> None:
        try:
            body = self._read_body()
            gateway = self.gateway_factory()
        except Exception as exc:
            response = error_response(exc)
        else:
            response = gateway.handle(self.command, self.path, self.headers, body)
        self._send(response)

    def _send(self, response: Response) -> None:
        self.send_response(response.status)
        for name, value in response.headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(response.body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(response.body)

    do_GET = _dispatch
    do_POST = _dispatch
    do_OPTIONS = _dispatch
    do_PUT = _dispatch
    do_PATCH = _dispatch
    do_DELETE = _dispatch
    do_HEAD = _dispatch


def serve(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve the gateway locally, one thread per request."""
    server = ThreadingHTTPServer((host, port), handler)
    print(f"Serving on http://{host}:{port}")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the chat gateway locally")
    parser.add_argument("--host", type=str, default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()
    serve(args.host, args.port)
