"""Tests for the trading API client."""

import base64
import io
import json
from decimal import Decimal
from http.client import BadStatusLine, IncompleteRead
from email.message import Message
from unittest.mock import Mock
from urllib.error import HTTPError, URLError

import pytest

from tradeload.api.auth import ManagementTokenSigner, TraderTokenSigner
from tradeload.api.client import TradingApiClient
from tradeload.data.models import OrderRequest, OrderSide

TRADER_SECRET = "trader-signing-secret-0123456789abcdef"
MANAGEMENT_SECRET = "management-signing-secret-0123456789abcdef"


class FakeResponse:
    """Minimal urlopen response."""

    def __init__(self, status=200, body=b"", headers=None):
        self.status = status
        self._body = body
        self.headers = headers or {"Content-Type": "application/json"}

    def getcode(self):
        return self.status

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False


def make_client(opener, timeout=None) -> TradingApiClient:
    return TradingApiClient(
        root_url="http://engine.test/",
        trader_signer=TraderTokenSigner(TRADER_SECRET, algorithm="HS256"),
        management_signer=ManagementTokenSigner({"applogic": MANAGEMENT_SECRET}, algorithm="HS256"),
        timeout_seconds=timeout,
        opener=opener,
    )


@pytest.fixture
def order(sample_trader) -> OrderRequest:
    return OrderRequest(
        side=OrderSide.SELL,
        market="btcusd",
        volume=Decimal("2"),
        price=Decimal("0.7"),
        trader=sample_trader,
    )


class TestTradingApiClient:
    """Test suite for TradingApiClient."""

    def test_get_balances(self, sample_trader) -> None:
        opener = Mock(return_value=FakeResponse(body=b'[{"currency":"usd","balance":"0.0"}]'))
        client = make_client(opener)

        response = client.get_balances(sample_trader)

        assert response.ok
        assert response.status == 200
        assert response.body == [{"currency": "usd", "balance": "0.0"}]
        request = opener.call_args[0][0]
        assert request.get_method() == "GET"
        assert request.full_url == "http://engine.test/api/v2/account/balances"
        assert request.data is None
        assert request.get_header("Authorization").startswith("Bearer ")
        assert opener.call_args[1] == {"timeout": None}

    def test_create_order_payload(self, order) -> None:
        opener = Mock(return_value=FakeResponse(status=201, body=b'{"id": 1}'))
        client = make_client(opener, timeout=2.5)

        response = client.create_order(order)

        assert response.ok
        request = opener.call_args[0][0]
        assert request.get_method() == "POST"
        assert request.full_url == "http://engine.test/api/v2/market/orders"
        assert json.loads(request.data) == {
            "side": "sell", "market": "btcusd", "volume": "2", "price": "0.7"
        }
        assert request.get_header("Content-type") == "application/json"
        assert opener.call_args[1] == {"timeout": 2.5}

    def test_create_deposit_is_multisigned(self, sample_trader) -> None:
        opener = Mock(return_value=FakeResponse(status=201, body=b"{}"))
        client = make_client(opener)

        response = client.create_deposit(sample_trader, "btc", Decimal("1000000000"))

        assert response.ok
        request = opener.call_args[0][0]
        assert request.full_url == "http://engine.test/management_api/v1/deposits/new"
        body = json.loads(request.data)
        assert body["signatures"][0]["header"] == {"kid": "applogic"}
        padded = body["payload"] + "=" * (-len(body["payload"]) % 4)
        payload = json.loads(base64.urlsafe_b64decode(padded))
        assert payload["data"] == {
            "uid": sample_trader.uid,
            "currency": "btc",
            "amount": "1000000000",
            "state": "accepted",
        }

    def test_http_error_is_returned_not_raised(self, order) -> None:
        headers = Message()
        headers["Content-Type"] = "application/json"
        error = HTTPError(
            "http://engine.test/api/v2/market/orders",
            422,
            "Unprocessable Entity",
            headers,
            io.BytesIO(b'{"errors":["market.order.invalid_volume"]}'),
        )
        client = make_client(Mock(side_effect=error))

        response = client.create_order(order)

        assert not response.ok
        assert response.status == 422
        description = response.error.describe()
        assert "POST http://engine.test/api/v2/market/orders failed: HTTP 422" in description
        assert '"market":"btcusd"' in description
        assert "market.order.invalid_volume" in description
        assert "application/json" in description
        # Bearer tokens are shortened in diagnostics
        token = response.error.request_headers["Authorization"]
        assert token.endswith("...")
        assert len(token) == len("Bearer ") + 16 + 3

    def test_network_error_is_returned(self, sample_trader) -> None:
        client = make_client(Mock(side_effect=URLError("Connection refused")))

        response = client.get_balances(sample_trader)

        assert not response.ok
        assert response.status is None
        description = response.error.describe()
        assert "no response" in description
        assert "Connection refused" in description

    def test_malformed_status_line_is_returned(self, order) -> None:
        client = make_client(Mock(side_effect=BadStatusLine("GARBAGE")))

        response = client.create_order(order)

        assert not response.ok
        assert response.status is None
        assert "BadStatusLine" in response.error.describe()

    def test_truncated_body_is_returned(self, sample_trader) -> None:
        truncated = FakeResponse(status=200)
        truncated.read = Mock(side_effect=IncompleteRead(b"{\"bal", 20))
        client = make_client(Mock(return_value=truncated))

        response = client.get_balances(sample_trader)

        assert not response.ok
        assert "IncompleteRead" in response.error.reason

    def test_url_without_scheme_is_returned(self, sample_trader) -> None:
        client = make_client(Mock())
        client.root_url = "engine.test"

        response = client.get_balances(sample_trader)

        assert not response.ok
        assert response.error.reason.startswith("Invalid request")

    def test_non_json_body(self, sample_trader) -> None:
        client = make_client(Mock(return_value=FakeResponse(body=b"pong", headers={})))

        response = client.get_balances(sample_trader)

        assert response.body == "pong"

    def test_unexpected_status_is_an_error(self, sample_trader) -> None:
        client = make_client(Mock(return_value=FakeResponse(status=304, body=b"")))

        response = client.get_balances(sample_trader)

        assert not response.ok
        assert response.error.status == 304
