import json
from enum import Enum

import pytest

from bybit_api.response import ErrorResponse, RateLimitError
from bybit_api.v5_account import V5AccountService, V5GetTransactionLogParam


class FakeV5Client:
    def __init__(self, payload):
        self.body = json.dumps(payload).encode()
        self.calls = []

    def get_v5_privately(self, path, query):
        self.calls.append((path, dict(query)))
        return self.body


class AccountType(str, Enum):
    UNIFIED = "UNIFIED"


def _wallet_coin():
    return dict(
        availableToBorrow="2.5",
        accruedInterest="0",
        availableToWithdraw="0.805994",
        totalOrderIM="0",
        equity="0.805994",
        totalPositionMM="0",
        usdValue="12920.95352538",
        unrealisedPnl="0",
        borrowAmount="0",
        totalPositionIM="0",
        walletBalance="0.805994",
        free="",
        locked="",
        cumRealisedPnl="0",
        coin="BTC",
    )


def _wallet_entry():
    return dict(
        totalEquity="18070.32797922",
        accountIMRate="0.0101",
        totalMarginBalance="18070.32797922",
        totalInitialMargin="182.60183684",
        accountType="UNIFIED",
        totalAvailableBalance="17887.72614237",
        accountMMRate="0",
        totalPerpUPL="-0.11001349",
        totalWalletBalance="18070.43799271",
        totalMaintenanceMargin="0.38106773",
        coin=[_wallet_coin()],
    )


def _transaction_item():
    return dict(
        symbol="BTCUSDT",
        category="linear",
        side="Sell",
        transactionTime="1680525485078",
        type="TRADE",
        qty="0.01",
        size="0",
        currency="USDT",
        tradePrice="28149.9",
        funding="",
        fee="0.16889940",
        cashFlow="0.052",
        change="-0.1168994",
        cashBalance="1149.11399896",
        feeRate="0.0006",
        bonusChange="0",
        tradeId="259f8703-26ff-5e31-b9c6-edf3f2869f9a",
        orderId="bb9020dc-92e2-4216-becf-cf4be4dcc81a",
        orderLinkId="",
    )


WALLET_BALANCE_BODY = {"result": {"list": [_wallet_entry()]}}

ACCOUNT_INFO_BODY = {
    "result": dict(
        marginMode="REGULAR_MARGIN",
        updatedTime="1672106576000",
        unifiedMarginStatus=3,
    )
}

TRANSACTION_LOG_BODY = {
    "result": dict(nextPageCursor="133%3A1%2C133%3A1", list=[_transaction_item()])
}


def test_get_wallet_balance_success():
    client = FakeV5Client(WALLET_BALANCE_BODY)
    resp = V5AccountService(client).get_wallet_balance("UNIFIED", None)

    assert client.calls == [("/v5/account/wallet-balance", {"accountType": "UNIFIED"})]
    assert resp.result.to_dict() == WALLET_BALANCE_BODY["result"]
    assert resp.result.items[0].coin[0].coin == "BTC"


def test_get_wallet_balance_with_coins_and_enum():
    client = FakeV5Client(WALLET_BALANCE_BODY)
    V5AccountService(client).get_wallet_balance(AccountType.UNIFIED, ["USDT", "USDC"])
    assert client.calls == [
        ("/v5/account/wallet-balance", {"accountType": "UNIFIED", "coin": "USDT,USDC"})
    ]


def test_get_account_info_success():
    client = FakeV5Client(ACCOUNT_INFO_BODY)
    resp = V5AccountService(client).get_account_info()

    assert client.calls == [("/v5/account/info", {})]
    assert resp.result.to_dict() == ACCOUNT_INFO_BODY["result"]
    assert resp.result.unified_margin_status == 3


def test_get_transaction_log_success():
    client = FakeV5Client(TRANSACTION_LOG_BODY)
    resp = V5AccountService(client).get_transaction_log(V5GetTransactionLogParam())

    assert client.calls == [("/v5/account/transaction-log", {})]
    assert resp.result.to_dict() == TRANSACTION_LOG_BODY["result"]
    assert resp.result.items[0].type == "TRADE"


def test_get_transaction_log_authentication_required():
    client = FakeV5Client({"retCode": 10003, "retMsg": "API key is invalid."})
    with pytest.raises(ErrorResponse) as info:
        V5AccountService(client).get_transaction_log(V5GetTransactionLogParam())
    assert info.value.ret_code == 10003
    assert info.value.ret_msg == "API key is invalid."


def test_rate_limited_request():
    client = FakeV5Client({"retCode": 10018, "retMsg": "too many visits"})
    with pytest.raises(RateLimitError):
        V5AccountService(client).get_account_info()


def test_transaction_log_param_to_query():
    param = V5GetTransactionLogParam(limit=1, currency="USDT", start_time=1680525485078)
    assert param.to_query() == {
        "limit": "1",
        "currency": "USDT",
        "startTime": "1680525485078",
    }
    assert V5GetTransactionLogParam().to_query() == {}


def test_malformed_result_raises():
    client = FakeV5Client({"result": {"list": "not a list"}})
    with pytest.raises(ValueError):
        V5AccountService(client).get_wallet_balance("UNIFIED")