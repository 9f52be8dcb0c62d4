import json
import urllib.error
import urllib.request

import pytest

from bybit_api.testhelper.server import new_server, with_handler_option


def _body():
    return json.dumps({"message": "ok"}).encode()


def test_handler_for_the_path_exists():
    body = _body()
    server = new_server(with_handler_option("/test", "GET", 200, body))
    try:
        with urllib.request.urlopen(server.url + "/test") as resp:
            got = resp.read()
            status = resp.status
    finally:
        server.close()
    assert got == body
    assert status == 200


def test_handler_for_the_path_not_exists():
    with new_server() as server:
        with pytest.raises(urllib.error.HTTPError) as info:
            urllib.request.urlopen(server.url + "/test")
    assert info.value.code == 404


def test_reply_is_json():
    with new_server(with_handler_option("/test", "GET", 200, _body())) as server:
        with urllib.request.urlopen(server.url + "/test") as resp:
            content_type = resp.headers["Content-Type"]
    assert content_type == "application/json"


def test_other_method_gets_empty_reply():
    with new_server(with_handler_option("/test", "POST", 200, _body())) as server:
        with urllib.request.urlopen(server.url + "/test") as resp:
            got = resp.read()
            status = resp.status
    assert got == b""
    assert status == 200


def test_post_with_form_body():
    body = _body()
    with new_server(with_handler_option("/spot/v1/order", "POST", 200, body)) as server:
        request = urllib.request.Request(
            server.url + "/spot/v1/order", data=b"symbol=BTCUSDT", method="POST"
        )
        with urllib.request.urlopen(request) as resp:
            got = resp.read()
    assert got == body


def test_status_is_passed_through():
    with new_server(with_handler_option("/test", "GET", 500, _body())) as server:
        with pytest.raises(urllib.error.HTTPError) as info:
            urllib.request.urlopen(server.url + "/test")
    assert info.value.code == 500


def test_query_string_does_not_affect_routing():
    body = _body()
    with new_server(with_handler_option("/test", "GET", 200, body)) as server:
        with urllib.request.urlopen(server.url + "/test?symbol=BTCUSDT") as resp:
            got = resp.read()
    assert got == body


def test_several_routes():
    first = json.dumps({"n": 1}).encode()
    second = json.dumps({"n": 2}).encode()
    with new_server(
        with_handler_option("/a", "GET", 200, first),
        with_handler_option("/b", "GET", 200, second),
    ) as server:
        with urllib.request.urlopen(server.url + "/a") as resp:
            got_first = resp.read()
        with urllib.request.urlopen(server.url + "/b") as resp:
            got_second = resp.read()
    assert (got_first, got_second) == (first, second)


def test_url_is_local_http():
    with new_server() as server:
        url = server.url
    assert url.startswith("http://127.0.0.1:")