"""Pytest configuration and shared fixtures."""

import threading
from typing import Optional

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from tradeload.api.client import ApiCallError, ApiResponse
from tradeload.config.defaults import CredentialParams, GridRange, RunParameters
from tradeload.data.models import OrderRequest, Trader


class FakeApiClient:
    """In-memory stand-in for TradingApiClient with thread-safe call logs."""

    def __init__(
        self,
        fail_balances_for: Optional[set] = None,
        fail_deposits: bool = False,
        order_failure_every: int = 0,
        gate: Optional[threading.Event] = None
    ):
        self.fail_balances_for = fail_balances_for or set()
        self.fail_deposits = fail_deposits
        self.order_failure_every = order_failure_every
        self.gate = gate
        self.balances_calls: list[Trader] = []
        self.deposit_calls: list[tuple] = []
        self.orders: list[OrderRequest] = []
        self.in_flight = 0
        self._lock = threading.Lock()
        self.condition = threading.Condition(self._lock)

    def _error(self, method: str, path: str, status: int) -> ApiResponse:
        error = ApiCallError(
            method=method,
            url=f"http://engine.test{path}",
            request_headers={"Accept": "application/json"},
            request_body=None,
            status=status,
            reason="Unprocessable Entity",
            response_body='{"errors":["rejected"]}',
        )
        return ApiResponse(status=status, error=error)

    def get_balances(self, trader: Trader) -> ApiResponse:
        with self._lock:
            self.balances_calls.append(trader)
        if trader.uid in self.fail_balances_for or "*" in self.fail_balances_for:
            return self._error("GET", "/api/v2/account/balances", 401)
        return ApiResponse(status=200, body=[])

    def create_deposit(self, trader, currency, amount, state="accepted") -> ApiResponse:
        with self._lock:
            self.deposit_calls.append((trader.uid, currency, amount, state))
        if self.fail_deposits:
            return self._error("POST", "/management_api/v1/deposits/new", 422)
        return ApiResponse(status=201, body={"uid": trader.uid, "currency": currency})

    def create_order(self, order: OrderRequest) -> ApiResponse:
        with self.condition:
            self.orders.append(order)
            attempt = len(self.orders)
            self.in_flight += 1
            self.condition.notify_all()

        if self.gate is not None:
            self.gate.wait(timeout=10)

        with self.condition:
            self.in_flight -= 1

        if self.order_failure_every and attempt % self.order_failure_every == 0:
            return self._error("POST", "/api/v2/market/orders", 422)
        return ApiResponse(status=201, body={"id": attempt, "state": "wait"})

    def wait_for_in_flight(self, count: int, timeout: float = 5.0) -> bool:
        with self.condition:
            return self.condition.wait_for(lambda: self.in_flight >= count, timeout=timeout)


@pytest.fixture(scope="session")
def rsa_private_pem() -> str:
    """RSA private key in PEM form."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture(scope="session")
def rsa_public_pem(rsa_private_pem: str) -> str:
    """Public half of rsa_private_pem."""
    key = serialization.load_pem_private_key(rsa_private_pem.encode(), password=None)
    return key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()


@pytest.fixture
def run_params() -> RunParameters:
    """Small run using HMAC secrets."""
    return RunParameters(
        root_url="http://engine.test",
        currencies=("usd", "btc"),
        markets=("btcusd", "ethusd"),
        traders=4,
        orders=50,
        workers=4,
        volume=GridRange(min=1.0, max=5.0, step=1.0),
        price=GridRange(min=0.5, max=1.5, step=0.1),
        credentials=CredentialParams(
            trader_key="trader-signing-secret-0123456789abcdef",
            trader_algorithm="HS256",
            management_keys={"applogic": "management-signing-secret-0123456789abcdef"},
            management_algorithm="HS256",
        ),
    )


@pytest.fixture
def fake_client() -> FakeApiClient:
    return FakeApiClient()


@pytest.fixture
def sample_trader() -> Trader:
    return Trader(email="id0000000001@tradeload.test", uid="ID0000000001")


@pytest.fixture
def api_client_factory():
    """Build FakeApiClient instances with custom failure behaviour."""
    return FakeApiClient
