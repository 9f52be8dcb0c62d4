"""Account endpoints of the v5 API."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from typing import Any, Protocol, TypeVar

from .response import (
    CommonV5Response,
    _decode_body,
    _join,
    _many,
    _text,
    _wire,
    _WireModel,
    check_v5_response_body,
)


class _V5Client(Protocol):
    def get_v5_privately(self, path: str, query: Mapping[str, str]) -> bytes | str: ...


@dataclass
class V5WalletBalanceCoin(_WireModel):
    """Balance of one coin within a wallet."""

    available_to_borrow: str = _wire("availableToBorrow")
    accrued_interest: str = _wire("accruedInterest")
    available_to_withdraw: str = _wire("availableToWithdraw")
    total_order_im: str = _wire("totalOrderIM")
    equity: str = _wire("equity")
    total_position_mm: str = _wire("totalPositionMM")
    usd_value: str = _wire("usdValue")
    unrealised_pnl: str = _wire("unrealisedPnl")
    borrow_amount: str = _wire("borrowAmount")
    total_position_im: str = _wire("totalPositionIM")
    wallet_balance: str = _wire("walletBalance")
    cum_realised_pnl: str = _wire("cumRealisedPnl")
    free: str = _wire("free")
    locked: str = _wire("locked")
    coin: str = _wire("coin")


@dataclass
class V5WalletBalanceList(_WireModel):
    """Totals of one account together with its coins."""

    total_equity: str = _wire("totalEquity")
    account_im_rate: str = _wire("accountIMRate")
    total_margin_balance: str = _wire("totalMarginBalance")
    total_initial_margin: str = _wire("totalInitialMargin")
    account_type: str = _wire("accountType")
    total_available_balance: str = _wire("totalAvailableBalance")
    account_mm_rate: str = _wire("accountMMRate")
    total_perp_upl: str = _wire("totalPerpUPL")
    total_wallet_balance: str = _wire("totalWalletBalance")
    total_maintenance_margin: str = _wire("totalMaintenanceMargin")
    coin: list[V5WalletBalanceCoin] = _wire(
        "coin", parse=_many(V5WalletBalanceCoin), factory=list
    )


@dataclass
class V5WalletBalanceResult(_WireModel):
    """Wallet balances, one entry per account."""

    items: list[V5WalletBalanceList] = _wire(
        "list", parse=_many(V5WalletBalanceList), factory=list
    )


@dataclass
class V5GetWalletBalanceResponse(CommonV5Response):
    """Reply of the wallet balance endpoint."""

    result: V5WalletBalanceResult = _wire(
        "result", parse=V5WalletBalanceResult.from_dict, factory=V5WalletBalanceResult
    )


@dataclass
class V5AccountInfoResult(_WireModel):
    """Margin settings of the account."""

    margin_mode: str = _wire("marginMode")
    updated_time: str = _wire("updatedTime")
    unified_margin_status: int = _wire("unifiedMarginStatus", 0)


@dataclass
class V5GetAccountInfoResponse(CommonV5Response):
    """Reply of the account info endpoint."""

    result: V5AccountInfoResult = _wire(
        "result", parse=V5AccountInfoResult.from_dict, factory=V5AccountInfoResult
    )


_QUERY_KEYS = {
    "account_type": "accountType",
    "category": "category",
    "currency": "currency",
    "base_coin": "baseCoin",
    "type": "type",
    "start_time": "startTime",
    "end_time": "endTime",
    "limit": "limit",
    "cursor": "cursor",
}


@dataclass
class V5GetTransactionLogParam:
    """Filters for the transaction log; unset filters are not sent."""

    account_type: Any = None
    category: Any = None
    currency: str | None = None
    base_coin: Any = None
    type: Any = None
    start_time: int | None = None  # milliseconds
    end_time: int | None = None  # milliseconds
    limit: int | None = None  # 1 to 50, the server defaults to 20
    cursor: str | None = None

    def to_query(self) -> dict[str, str]:
        """Return the query parameters for the set filters."""
        return {
            _QUERY_KEYS[spec.name]: _text(getattr(self, spec.name))
            for spec in fields(self)
            if getattr(self, spec.name) is not None
        }


@dataclass
class V5GetTransactionLogItem(_WireModel):
    """One entry of the transaction log."""

    symbol: str = _wire("symbol")
    category: str = _wire("category")
    side: str = _wire("side")
    transaction_time: str = _wire("transactionTime")
    type: str = _wire("type")
    qty: str = _wire("qty")
    size: str = _wire("size")
    currency: str = _wire("currency")
    trade_price: str = _wire("tradePrice")
    funding: str = _wire("funding")
    fee: str = _wire("fee")
    cash_flow: str = _wire("cashFlow")
    change: str = _wire("change")
    cash_balance: str = _wire("cashBalance")
    fee_rate: str = _wire("feeRate")
    bonus_change: str = _wire("bonusChange")
    trade_id: str = _wire("tradeId")
    order_id: str = _wire("orderId")
    order_link_id: str = _wire("orderLinkId")


@dataclass
class V5GetTransactionLogResult(_WireModel):
    """A page of the transaction log."""

    next_page_cursor: str = _wire("nextPageCursor")
    items: list[V5GetTransactionLogItem] = _wire(
        "list", parse=_many(V5GetTransactionLogItem), factory=list
    )


@dataclass
class V5GetTransactionLogResponse(CommonV5Response):
    """Reply of the transaction log endpoint."""

    result: V5GetTransactionLogResult = _wire(
        "result",
        parse=V5GetTransactionLogResult.from_dict,
        factory=V5GetTransactionLogResult,
    )


_R = TypeVar("_R", bound=CommonV5Response)


class V5AccountService:
    """Private account endpoints."""

    def __init__(self, client: _V5Client) -> None:
        self._client = client

    def _get(self, path: str, query: Mapping[str, str], model: type[_R]) -> _R:
        body = self._client.get_v5_privately(path, query)
        return _decode_body(body, model, check_v5_response_body)

    def get_wallet_balance(
        self, account_type: Any, coins: Iterable[Any] | None = None
    ) -> V5GetWalletBalanceResponse:
        """Fetch wallet balances of an account type (UNIFIED or CONTRACT).

        Without coins the server returns every non-zero asset.
        """
        query = {"accountType": _text(account_type)}
        coin_list = list(coins or ())
        if coin_list:
            query["coin"] = _join(coin_list)
        return self._get("/v5/account/wallet-balance", query, V5GetWalletBalanceResponse)

    def get_account_info(self) -> V5GetAccountInfoResponse:
        """Fetch the account's margin settings."""
        return self._get("/v5/account/info", {}, V5GetAccountInfoResponse)

    def get_transaction_log(
        self, param: V5GetTransactionLogParam
    ) -> V5GetTransactionLogResponse:
        """Fetch a page of the transaction log."""
        return self._get(
            "/v5/account/transaction-log", param.to_query(), V5GetTransactionLogResponse
        )