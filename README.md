# bybit_api

Reply models, query builders and endpoint wrappers for parts of the Bybit
exchange REST API, plus local mock servers and golden-file helpers for tests.

## What is in the package

### `bybit_api.response`

- `check_response_body(body)` reads a raw reply of the older endpoints
  (`ret_code` / `ret_msg`). It raises `RateLimitError` for return code 10006
  and `ErrorResponse` for any other non-zero code.
- `check_v3_response_body(body)` reads a `retCode` / `retMsg` reply and raises
  `ErrorResponse` for any non-zero code.
- `check_v5_response_body(body)` does the same, but raises `RateLimitError` for
  return codes 10006 and 10018.
- `CommonResponse` and `CommonV5Response` are the two reply envelopes, built
  with `from_dict(data)`.
- `ErrorResponse` carries `ret_code` and `ret_msg`; its text is
  `"<ret_code>, <ret_msg>"`. `RateLimitError` carries the decoded envelope and
  shows the message together with the time left until the limit resets.
- `PathNotFoundError` and `AccessDeniedError` are plain error classes for
  callers to raise.

```python
from bybit_api.response import ErrorResponse, RateLimitError, check_v5_response_body

try:
    check_v5_response_body(b'{"retCode": 10001, "retMsg": "params error"}')
except RateLimitError as exc:
    print("throttled:", exc)
except ErrorResponse as exc:
    print(exc.ret_code, exc.ret_msg)   # 10001 params error
```

### Endpoint wrappers

- `bybit_api.time_service.TimeService.get_server_time()` returns a
  `GetServerTimeResponse` whose `result` holds `time_second` and `time_nano`.
- `bybit_api.v5_account.V5AccountService` has `get_wallet_balance(account_type,
  coins)`, `get_account_info()` and `get_transaction_log(param)`, the last
  taking a `V5GetTransactionLogParam`. Coins are sent comma-joined; without
  coins the parameter is left out.
- `bybit_api.spot_v1.SpotV1Service` covers market data (`spot_symbols`,
  `spot_quote_depth`, `spot_quote_depth_merged`, `spot_quote_trades`,
  `spot_quote_kline`, `spot_quote_ticker_24hr`, `spot_quote_ticker_price`,
  `spot_quote_ticker_book_ticker`), orders (`spot_post_order`,
  `spot_get_order`, `spot_delete_order`, `spot_delete_order_fast`,
  `spot_order_batch_cancel`, `spot_order_batch_fast_cancel`,
  `spot_order_batch_cancel_by_ids`, `spot_open_orders`) and
  `spot_get_wallet_balance`. Each returns a `SpotResponse` whose `result` is the
  decoded payload. `spot_order_batch_cancel_by_ids` raises `ValueError` for more
  than 100 ids. `parse_bids_asks` and `parse_kline` decode the array-shaped
  order book levels and candlesticks, raising `ValueError` on a wrong length.

Every parameter class has a `to_query()` method that returns the query as a
dict of strings; unset optional fields are left out.

Reply models are dataclasses with `from_dict(data)` and `to_dict()`.

### Supplying the transport

The services do no networking themselves. They are built with a client object
and call one of its methods with a path and a query dict, expecting the raw
reply body (`bytes` or `str`) back:

- `TimeService` calls `get_publicly(path, query)`.
- `V5AccountService` calls `get_v5_privately(path, query)`.
- `SpotV1Service` calls `get_publicly`, `get_privately`, `post_form` and
  `delete_privately`.

```python
from bybit_api.time_service import TimeService

class CannedClient:
    def get_publicly(self, path, query):
        return b'{"ret_code": 0, "result": {"timeSecond": "1688721231", "timeNano": "1688721231460000000"}}'

reply = TimeService(CannedClient()).get_server_time()
print(reply.result.time_second)   # 1688721231
```

## What the package does not do

There is no HTTP client in the package: it does not send requests, sign them,
hold API credentials, pick a base URL (main or test network) or keep the local
clock in step with the server. Those belong to the client object you pass to
the services. There is no websocket stream client either; the websocket code
here is only a mock server for tests.

## Testing helpers

`bybit_api.testhelper` holds:

- `server.new_server(with_handler_option(path, method, status, resp_body))`
  starts a local HTTP server in a background thread. It answers `path` with
  the given status and JSON body for the given method, with an empty 200 reply
  for other methods, and with 404 for unknown paths. `MockServer.url` is its
  address; call `close()` or use it as a context manager.
- `server_websocket.new_websocket_server(with_websocket_handler_option(path,
  resp_body))` starts a local websocket server that answers every message on
  `path` with `resp_body` and refuses the handshake on other paths.
  `make_ws_protocol(url)` turns an `http(s)://` URL into `ws(s)://`.
- `golden.convert_to_json(src)` renders indented JSON; `json_equal(want, got)`
  compares two values as JSON documents. `compare(golden_filename, got)`
  returns `False` when the golden file is missing, `True` when it matches, and
  raises `AssertionError` when it differs. `save_to_file(name, data)` writes a
  file with mode 0644, and `update_file(filename, data)` does so only when the
  environment variable `BYBIT_TEST_UPDATED` is `true`.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```