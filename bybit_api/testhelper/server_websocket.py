"""A local websocket server that answers every message with a canned reply."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from http import HTTPStatus
from typing import Any
from urllib.parse import urlsplit

from websockets.exceptions import ConnectionClosed
from websockets.sync.server import serve

_log = logging.getLogger(__name__)

WsHandler = Callable[[Any], None]
WsMux = dict[str, WsHandler]
WsOption = Callable[[WsMux], None]


def make_ws_protocol(url: str) -> str:
    """Swap an http or https scheme for ws or wss."""
    if url.startswith("https"):
        return "wss" + url[len("https"):]
    if url.startswith("http"):
        return "ws" + url[len("http"):]
    return url


class MockWebsocketServer:
    """Websocket server on a free local port, serving the routes of a mux."""

    def __init__(self, mux: WsMux) -> None:
        routes = dict(mux)

        def route_of(path: str) -> WsHandler | None:
            return routes.get(urlsplit(path).path)

        def process_request(connection: Any, request: Any) -> Any:
            if route_of(request.path) is None:
                return connection.protocol.reject(
                    HTTPStatus.NOT_FOUND, "404 page not found\n"
                )
            return None

        def handler(connection: Any) -> None:
            route = route_of(connection.request.path)
            if route is not None:
                route(connection)

        self._server = serve(handler, "127.0.0.1", 0, process_request=process_request)
        port = self._server.socket.getsockname()[1]
        self.url = make_ws_protocol(f"http://127.0.0.1:{port}")
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()
        self._closed = False

    def close(self) -> None:
        """Stop serving and release the port."""
        if self._closed:
            return
        self._closed = True
        self._server.shutdown()
        self._thread.join()

    def __enter__(self) -> MockWebsocketServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def new_websocket_server(*args: WsOption) -> MockWebsocketServer:
    """Start a websocket server with the routes the options register."""
    mux: WsMux = {}
    for option in args:
        option(mux)
    return MockWebsocketServer(mux)


def with_websocket_handler_option(path: str, resp_body: bytes | str) -> WsOption:
    """Answer each message received at ``path`` with ``resp_body``.

    The reply is a text frame when the message was text, binary otherwise.
    """
    body = resp_body.encode("utf-8") if isinstance(resp_body, str) else bytes(resp_body)
    try:
        text: str | None = body.decode("utf-8")
    except UnicodeDecodeError:
        text = None

    def handle(connection: Any) -> None:
        try:
            for message in connection:
                if isinstance(message, str) and text is not None:
                    connection.send(text)
                else:
                    connection.send(body)
        except ConnectionClosed as exc:
            _log.debug("read: %s", exc)

    def register(mux: WsMux) -> None:
        mux[path] = handle

    return register