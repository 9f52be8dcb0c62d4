import json

import pytest
from websockets.exceptions import InvalidHandshake
from websockets.sync.client import connect

from bybit_api.testhelper.server_websocket import (
    make_ws_protocol,
    new_websocket_server,
    with_websocket_handler_option,
)


def _body():
    return json.dumps({"message": "ok"}).encode()


def test_path_exist():
    body = _body()
    server = new_websocket_server(with_websocket_handler_option("/test", body))
    try:
        with connect(server.url + "/test") as ws:
            ws.send("")
            message = ws.recv()
    finally:
        server.close()
    assert message == body.decode()


def test_path_not_exist():
    with new_websocket_server() as server:
        url = server.url
        with pytest.raises(InvalidHandshake):
            connect(url + "/test")
    assert url.startswith("ws://")


def test_binary_message_gets_binary_reply():
    body = _body()
    with new_websocket_server(with_websocket_handler_option("/test", body)) as server:
        with connect(server.url + "/test") as ws:
            ws.send(b"\x00\x01")
            message = ws.recv()
    assert message == body


def test_every_message_is_answered():
    body = _body()
    with new_websocket_server(with_websocket_handler_option("/test", body)) as server:
        with connect(server.url + "/test") as ws:
            replies = []
            for text in ("first", "second", "third"):
                ws.send(text)
                replies.append(ws.recv())
    assert replies == [body.decode()] * 3


def test_server_url_uses_ws_scheme():
    with new_websocket_server() as server:
        url = server.url
    assert url.startswith("ws://127.0.0.1:")


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("http://127.0.0.1:8080", "ws://127.0.0.1:8080"),
        ("https://stream-testnet.bybit.com", "wss://stream-testnet.bybit.com"),
        ("wss://stream-testnet.bybit.com", "wss://stream-testnet.bybit.com"),
    ],
)
def test_make_ws_protocol(url, expected):
    assert make_ws_protocol(url) == expected