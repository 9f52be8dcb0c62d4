"""A local HTTP server that serves canned replies for tests."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import urlsplit

Reply = tuple[int, dict[str, str], bytes]
Handler = Callable[[str], Reply]
Mux = dict[str, Handler]
Option = Callable[[Mux], None]

_log = logging.getLogger(__name__)

_NOT_FOUND: Reply = (
    HTTPStatus.NOT_FOUND,
    {"Content-Type": "text/plain; charset=utf-8"},
    b"404 page not found\n",
)


class MockServer:
    """HTTP server on a free local port, serving the routes of a mux."""

    def __init__(self, mux: Mux) -> None:
        routes = dict(mux)

        class _Handler(BaseHTTPRequestHandler):
            def _dispatch(self) -> None:
                length = int(self.headers.get("Content-Length") or 0)
                if length:
                    self.rfile.read(length)
                route = routes.get(urlsplit(self.path).path)
                status, headers, body = _NOT_FOUND if route is None else route(self.command)
                self.send_response(int(status))
                for name, value in headers.items():
                    self.send_header(name, value)
                self.send_header("Content-Length", str(len(body)))
                self.end_headers()
                if self.command != "HEAD":
                    self.wfile.write(body)

            do_GET = do_POST = do_PUT = do_DELETE = do_PATCH = do_HEAD = _dispatch

            def log_message(self, format: str, *args: object) -> None:
                _log.debug("%s - %s", self.address_string(), format % args)

        self._server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
        self._server.daemon_threads = True
        port = self._server.server_address[1]
        self.url = f"http://127.0.0.1:{port}"
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        self._closed = False

    def close(self) -> None:
        """Stop serving and release the port."""
        if self._closed:
            return
        self._closed = True
        self._server.shutdown()
        self._server.server_close()
        self._thread.join()

    def __enter__(self) -> MockServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def new_server(*args: Option) -> MockServer:
    """Start a server with the routes the options register."""
    mux: Mux = {}
    for option in args:
        option(mux)
    return MockServer(mux)


def with_handler_option(
    path: str, method: str, status: int, resp_body: bytes | str
) -> Option:
    """Serve ``resp_body`` with ``status`` at ``path`` for ``method`` requests.

    Requests with another method get an empty 200 reply.
    """
    body = resp_body.encode("utf-8") if isinstance(resp_body, str) else bytes(resp_body)

    def handle(request_method: str) -> Reply:
        headers = {"Content-Type": "application/json"}
        if request_method == method:
            return status, headers, body
        return HTTPStatus.OK, headers, b""

    def register(mux: Mux) -> None:
        mux[path] = handle

    return register