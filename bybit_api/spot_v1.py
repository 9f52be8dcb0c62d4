"""Spot v1 market, order and wallet endpoints."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any, Protocol

from .response import (
    CommonResponse,
    _encode,
    _join,
    _load,
    _many,
    _text,
    _wire,
    _WireModel,
    check_response_body,
)

_MAX_BATCH_IDS = 100
_KLINE_LENGTH = 11


class _SpotClient(Protocol):
    def get_publicly(self, path: str, query: Mapping[str, str] | None) -> bytes | str: ...

    def get_privately(self, path: str, query: Mapping[str, str]) -> bytes | str: ...

    def post_form(self, path: str, query: Mapping[str, str]) -> bytes | str: ...

    def delete_privately(self, path: str, query: Mapping[str, str]) -> bytes | str: ...


def _value(value: Any) -> str:
    """Render a query value; whole floats lose their fractional part."""
    if isinstance(value, float) and not isinstance(value, bool):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return _text(value)


def _query(*pairs: tuple[str, Any]) -> dict[str, str]:
    """Build a query from key/value pairs, leaving out unset values."""
    return {key: _value(value) for key, value in pairs if value is not None}


@dataclass
class SpotSymbolsResult(_WireModel):
    """A tradable spot symbol and its limits."""

    name: str = _wire("name")
    alias: str = _wire("alias")
    base_currency: str = _wire("baseCurrency")
    quote_currency: str = _wire("quoteCurrency")
    base_precision: str = _wire("basePrecision")
    quote_precision: str = _wire("quotePrecision")
    min_trade_quantity: str = _wire("minTradeQuantity")
    min_trade_amount: str = _wire("minTradeAmount")
    min_price_precision: str = _wire("minPricePrecision")
    max_trade_quantity: str = _wire("maxTradeQuantity")
    max_trade_amount: str = _wire("maxTradeAmount")
    category: int = _wire("category", 0)


@dataclass
class SpotQuoteDepthBidAsk(_WireModel):
    """One price level of the order book."""

    price: str = _wire("Price")
    quantity: str = _wire("Quantity")


def parse_bids_asks(data: Any) -> list[SpotQuoteDepthBidAsk]:
    """Parse a JSON array of [price, quantity] pairs."""
    if not isinstance(data, list):
        raise ValueError("bids and asks must be a JSON array")
    levels = []
    for item in data:
        if not isinstance(item, list) or not all(isinstance(part, str) for part in item):
            raise ValueError("each bid or ask must be an array of strings")
        if len(item) != 2:
            raise ValueError("so far len(item) must be 2, please check it on documents")
        price, quantity = item
        levels.append(SpotQuoteDepthBidAsk(price=price, quantity=quantity))
    return levels


@dataclass
class SpotQuoteDepthResult(_WireModel):
    """Order book snapshot."""

    time: int = _wire("time", 0)
    bids: list[SpotQuoteDepthBidAsk] = _wire("bids", parse=parse_bids_asks, factory=list)
    asks: list[SpotQuoteDepthBidAsk] = _wire("asks", parse=parse_bids_asks, factory=list)


@dataclass
class SpotQuoteTradesResult(_WireModel):
    """A public trade."""

    price: str = _wire("price")
    time: int = _wire("time", 0)
    qty: str = _wire("qty")
    is_buyer_maker: bool = _wire("isBuyerMaker", False)


@dataclass
class SpotQuoteKline(_WireModel):
    """One candlestick."""

    start_time: int = _wire("StartTime", 0)
    open: str = _wire("Open")
    high: str = _wire("High")
    low: str = _wire("Low")
    close: str = _wire("Close")
    volume: str = _wire("Volume")
    end_time: int = _wire("EndTime", 0)
    quote_asset_volume: str = _wire("QuoteAssetVolume")
    trades: int = _wire("Trades", 0)
    taker_base_volume: float = _wire("TakerBaseVolume", 0.0)
    taker_quote_volume: float = _wire("TakerQuoteVolume", 0.0)


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number in a kline, got {value!r}")
    return value


def _string(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected a string in a kline, got {value!r}")
    return value


def parse_kline(data: Any) -> SpotQuoteKline:
    """Parse one candlestick sent as an array of eleven values."""
    if not isinstance(data, list):
        raise ValueError("a kline must be a JSON array")
    if len(data) != _KLINE_LENGTH:
        raise ValueError("so far len(items) must be 11, please check it on documents")
    return SpotQuoteKline(
        start_time=int(_number(data[0])),
        open=_string(data[1]),
        high=_string(data[2]),
        low=_string(data[3]),
        close=_string(data[4]),
        volume=_string(data[5]),
        end_time=int(_number(data[6])),
        quote_asset_volume=_string(data[7]),
        trades=int(_number(data[8])),
        taker_base_volume=float(_number(data[9])),
        taker_quote_volume=float(_number(data[10])),
    )


def _klines(data: Any) -> list[SpotQuoteKline]:
    if not isinstance(data, list):
        raise ValueError("klines must be a JSON array")
    return [parse_kline(item) for item in data]


@dataclass
class SpotQuoteTicker24hrResult(_WireModel):
    """Price statistics over the last 24 hours."""

    time: int = _wire("time", 0)
    symbol: str = _wire("symbol")
    best_bid_price: str = _wire("bestBidPrice")
    best_ask_price: str = _wire("bestAskPrice")
    last_price: str = _wire("lastPrice")
    open_price: str = _wire("openPrice")
    high_price: str = _wire("highPrice")
    low_price: str = _wire("lowPrice")
    volume: str = _wire("volume")
    quote_volume: str = _wire("quoteVolume")


@dataclass
class SpotQuoteTickerPriceResult(_WireModel):
    """Last traded price of a symbol."""

    symbol: str = _wire("symbol")
    price: str = _wire("price")


@dataclass
class SpotQuoteTickerBookTickerResult(_WireModel):
    """Best bid and ask of a symbol."""

    symbol: str = _wire("symbol")
    bid_price: str = _wire("bidPrice")
    bid_qty: str = _wire("bidQty")
    ask_price: str = _wire("askPrice")
    ask_qty: str = _wire("askQty")
    time: int = _wire("time", 0)


@dataclass
class SpotPostOrderResult(_WireModel):
    """An order as accepted by the exchange."""

    order_id: str = _wire("orderId")
    order_link_id: str = _wire("orderLinkId")
    symbol: str = _wire("symbol")
    transact_time: str = _wire("transactTime")
    price: str = _wire("price")
    orig_qty: str = _wire("origQty")
    type: str = _wire("type")
    side: str = _wire("side")
    status: str = _wire("status")
    time_in_force: str = _wire("timeInForce")
    account_id: str = _wire("accountId")
    symbol_name: str = _wire("symbolName")
    executed_qty: str = _wire("executedQty")


@dataclass
class SpotGetOrderResult(_WireModel):
    """Details of one order."""

    account_id: str = _wire("accountId")
    exchange_id: str = _wire("exchangeId")
    symbol: str = _wire("symbol")
    symbol_name: str = _wire("symbolName")
    order_link_id: str = _wire("orderLinkId")
    order_id: str = _wire("orderId")
    price: str = _wire("price")
    orig_qty: str = _wire("origQty")
    executed_qty: str = _wire("executedQty")
    cummulative_quote_qty: str = _wire("cummulativeQuoteQty")
    avg_price: str = _wire("avgPrice")
    status: str = _wire("status")
    time_in_force: str = _wire("timeInForce")
    type: str = _wire("type")
    side: str = _wire("side")
    stop_price: str = _wire("stopPrice")
    iceberg_qty: str = _wire("icebergQty")
    time: str = _wire("time")
    update_time: str = _wire("updateTime")
    is_working: bool = _wire("isWorking", False)


@dataclass
class SpotDeleteOrderResult(_WireModel):
    """An order after cancellation."""

    order_id: str = _wire("orderId")
    order_link_id: str = _wire("orderLinkId")
    symbol: str = _wire("symbol")
    status: str = _wire("status")
    account_id: str = _wire("accountId")
    transact_time: str = _wire("transactTime")
    price: str = _wire("price")
    orig_qty: str = _wire("origQty")
    executed_qty: str = _wire("executedQty")
    time_in_force: str = _wire("timeInForce")
    type: str = _wire("type")
    side: str = _wire("side")


@dataclass
class SpotOpenOrdersResult(SpotGetOrderResult):
    """An order that is still open."""


@dataclass
class _SpotDeleteOrderFastResult(_WireModel):
    is_cancelled: bool = _wire("isCancelled", False)


@dataclass
class _SpotBatchCancelResult(_WireModel):
    success: bool = _wire("success", False)


@dataclass
class _SpotBatchCancelByIdsResult(_WireModel):
    order_id: str = _wire("orderId")
    code: str = _wire("code")


@dataclass
class SpotWalletBalance(_WireModel):
    """Balance of one coin in the spot wallet."""

    coin: str = _wire("coin")
    coin_id: str = _wire("coinId")
    coin_name: str = _wire("coinName")
    total: str = _wire("total")
    free: str = _wire("free")
    locked: str = _wire("locked")


@dataclass
class _SpotWalletBalanceResult(_WireModel):
    balances: list[SpotWalletBalance] = _wire(
        "balances", parse=_many(SpotWalletBalance), factory=list
    )


@dataclass
class SpotResponse(CommonResponse):
    """Envelope of a spot reply together with its decoded result."""

    result: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object this reply stands for."""
        data = super().to_dict()
        data["result"] = _encode(self.result)
        return data


@dataclass
class SpotQuoteDepthParam:
    """Order book query."""

    symbol: Any
    limit: int | None = None

    def to_query(self) -> dict[str, str]:
        """Return the query parameters."""
        return _query(("symbol", self.symbol), ("limit", self.limit))


@dataclass
class SpotQuoteDepthMergedParam:
    """Merged order book query."""

    symbol: Any
    scale: int | None = None
    limit: int | None = None

    def to_query(self) -> dict[str, str]:
        """Return the query parameters."""
        return _query(
            ("symbol", self.symbol), ("scale", self.scale), ("limit", self.limit)
        )


@dataclass
class SpotQuoteTradesParam:
    """Public trades query."""

    symbol: Any
    limit: int | None = None

    def to_query(self) -> dict[str, str]:
        """Return the query parameters."""
        return _query(("symbol", self.symbol), ("limit", self.limit))


@dataclass
class SpotQuoteKlineParam:
    """Candlestick query."""

    symbol: Any
    interval: Any
    limit: int | None = None
    start_time: int | None = None
    end_time: int | None = None

    def to_query(self) -> dict[str, str]:
        """Return the query parameters."""
        return _query(
            ("symbol", self.symbol),
            ("interval", self.interval),
            ("limit", self.limit),
            ("startTime", self.start_time),
            ("endTime", self.end_time),
        )


@dataclass
class SpotSymbolParam:
    """Ticker query for one symbol, or for all when unset."""

    symbol: Any = None

    def to_query(self) -> dict[str, str]:
        """Return the query parameters."""
        return _query(("symbol", self.symbol))


@dataclass
class SpotPostOrderParam:
    """A new spot order."""

    symbol: Any
    qty: float
    side: Any
    type: Any
    time_in_force: Any = None
    price: float | None = None
    order_link_id: str | None = None

    def to_query(self) -> dict[str, str]:
        """Return the form parameters."""
        return _query(
            ("symbol", self.symbol),
            ("qty", self.qty),
            ("side", self.side),
            ("type", self.type),
            ("timeInForce", self.time_in_force),
            ("price", self.price),
            ("orderLinkId", self.order_link_id),
        )


@dataclass
class SpotOrderIdParam:
    """Identifies an order by exchange id or by client link id."""

    order_id: str | None = None
    order_link_id: str | None = None

    def to_query(self) -> dict[str, str]:
        """Return the query parameters."""
        return _query(("orderId", self.order_id), ("orderLinkId", self.order_link_id))


@dataclass
class SpotDeleteOrderFastParam:
    """Fast cancellation of one order."""

    symbol: Any
    order_id: str | None = None
    order_link_id: str | None = None

    def to_query(self) -> dict[str, str]:
        """Return the query parameters."""
        return _query(
            ("symbolId", self.symbol),
            ("orderId", self.order_id),
            ("orderLinkId", self.order_link_id),
        )


@dataclass
class SpotOrderBatchCancelParam:
    """Cancellation of every order of a symbol, optionally by side and type."""

    symbol: Any
    side: Any = None
    types: list[Any] = field(default_factory=list)

    def to_query(self) -> dict[str, str]:
        """Return the query parameters."""
        return _query(
            ("symbolId", self.symbol),
            ("side", self.side),
            ("orderTypes", _join(self.types) if self.types else None),
        )


@dataclass
class SpotOpenOrdersParam:
    """Open orders query."""

    symbol: Any = None
    order_id: str | None = None
    limit: int | None = None

    def to_query(self) -> dict[str, str]:
        """Return the query parameters."""
        return _query(
            ("symbol", self.symbol), ("orderId", self.order_id), ("limit", self.limit)
        )


def _respond(
    body: bytes | str,
    parse: Callable[[Any], Any],
    default: Callable[[], Any],
) -> SpotResponse:
    check_response_body(body)
    data = _load(body)
    common = CommonResponse.from_dict(data)
    raw = data.get("result")
    result = default() if raw is None else parse(raw)
    values = {spec.name: getattr(common, spec.name) for spec in fields(common)}
    return SpotResponse(**values, result=result)


class SpotV1Service:
    """Spot v1 endpoints."""

    def __init__(self, client: _SpotClient) -> None:
        self._client = client

    def spot_symbols(self) -> SpotResponse:
        """List tradable symbols."""
        body = self._client.get_publicly("/spot/v1/symbols", None)
        return _respond(body, _many(SpotSymbolsResult), list)

    def spot_quote_depth(self, param: SpotQuoteDepthParam) -> SpotResponse:
        """Fetch the order book."""
        body = self._client.get_publicly("/spot/quote/v1/depth", param.to_query())
        return _respond(body, SpotQuoteDepthResult.from_dict, SpotQuoteDepthResult)

    def spot_quote_depth_merged(self, param: SpotQuoteDepthMergedParam) -> SpotResponse:
        """Fetch the merged order book."""
        body = self._client.get_publicly("/spot/quote/v1/depth/merged", param.to_query())
        return _respond(body, SpotQuoteDepthResult.from_dict, SpotQuoteDepthResult)

    def spot_quote_trades(self, param: SpotQuoteTradesParam) -> SpotResponse:
        """Fetch recent public trades."""
        body = self._client.get_publicly("/spot/quote/v1/trades", param.to_query())
        return _respond(body, _many(SpotQuoteTradesResult), list)

    def spot_quote_kline(self, param: SpotQuoteKlineParam) -> SpotResponse:
        """Fetch candlesticks."""
        body = self._client.get_publicly("/spot/quote/v1/kline", param.to_query())
        return _respond(body, _klines, list)

    def spot_quote_ticker_24hr(self, param: SpotSymbolParam) -> SpotResponse:
        """Fetch 24 hour statistics."""
        body = self._client.get_publicly("/spot/quote/v1/ticker/24hr", param.to_query())
        return _respond(
            body, SpotQuoteTicker24hrResult.from_dict, SpotQuoteTicker24hrResult
        )

    def spot_quote_ticker_price(self, param: SpotSymbolParam) -> SpotResponse:
        """Fetch the last traded price."""
        body = self._client.get_publicly("/spot/quote/v1/ticker/price", param.to_query())
        return _respond(
            body, SpotQuoteTickerPriceResult.from_dict, SpotQuoteTickerPriceResult
        )

    def spot_quote_ticker_book_ticker(self, param: SpotSymbolParam) -> SpotResponse:
        """Fetch the best bid and ask."""
        body = self._client.get_publicly(
            "/spot/quote/v1/ticker/book_ticker", param.to_query()
        )
        return _respond(
            body,
            SpotQuoteTickerBookTickerResult.from_dict,
            SpotQuoteTickerBookTickerResult,
        )

    def spot_post_order(self, param: SpotPostOrderParam) -> SpotResponse:
        """Place an order."""
        body = self._client.post_form("/spot/v1/order", param.to_query())
        return _respond(body, SpotPostOrderResult.from_dict, SpotPostOrderResult)

    def spot_get_order(self, param: SpotOrderIdParam) -> SpotResponse:
        """Fetch one order."""
        body = self._client.get_privately("/spot/v1/order", param.to_query())
        return _respond(body, SpotGetOrderResult.from_dict, SpotGetOrderResult)

    def spot_delete_order(self, param: SpotOrderIdParam) -> SpotResponse:
        """Cancel one order."""
        body = self._client.delete_privately("/spot/v1/order", param.to_query())
        return _respond(body, SpotDeleteOrderResult.from_dict, SpotDeleteOrderResult)

    def spot_delete_order_fast(self, param: SpotDeleteOrderFastParam) -> SpotResponse:
        """Cancel one order without waiting for its final state."""
        body = self._client.delete_privately("/spot/v1/order/fast", param.to_query())
        return _respond(
            body, _SpotDeleteOrderFastResult.from_dict, _SpotDeleteOrderFastResult
        )

    def spot_order_batch_cancel(self, param: SpotOrderBatchCancelParam) -> SpotResponse:
        """Cancel every matching order of a symbol."""
        body = self._client.delete_privately("/spot/order/batch-cancel", param.to_query())
        return _respond(body, _SpotBatchCancelResult.from_dict, _SpotBatchCancelResult)

    def spot_order_batch_fast_cancel(
        self, param: SpotOrderBatchCancelParam
    ) -> SpotResponse:
        """Cancel every matching order of a symbol without waiting."""
        body = self._client.delete_privately(
            "/spot/order/batch-fast-cancel", param.to_query()
        )
        return _respond(body, _SpotBatchCancelResult.from_dict, _SpotBatchCancelResult)

    def spot_order_batch_cancel_by_ids(self, order_ids: Iterable[str]) -> SpotResponse:
        """Cancel up to 100 orders by id."""
        ids = list(order_ids)
        if len(ids) > _MAX_BATCH_IDS:
            raise ValueError("orderIDs length must be no more than 100")
        body = self._client.delete_privately(
            "/spot/order/batch-cancel-by-ids", {"orderIds": ",".join(ids)}
        )
        return _respond(body, _many(_SpotBatchCancelByIdsResult), list)

    def spot_open_orders(self, param: SpotOpenOrdersParam) -> SpotResponse:
        """List open orders."""
        body = self._client.get_privately("/spot/v1/open-orders", param.to_query())
        return _respond(body, _many(SpotOpenOrdersResult), list)

    def spot_get_wallet_balance(self) -> SpotResponse:
        """Fetch the spot wallet balances."""
        body = self._client.get_privately("/spot/v1/account", {})
        return _respond(
            body, _SpotWalletBalanceResult.from_dict, _SpotWalletBalanceResult
        )