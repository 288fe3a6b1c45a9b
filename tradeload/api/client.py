"""HTTP client for the remote trading-engine API."""

import http.client
import json
import socket
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Optional, Union
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..data.models import OrderRequest, Trader
from .auth import ManagementTokenSigner, TraderTokenSigner
from .endpoints import Peatio


@dataclass
class ApiCallError:
    """Diagnostic for a failed API call."""
    method: str
    url: str
    request_headers: dict[str, str]
    request_body: Optional[str]
    status: Optional[int] = None
    reason: Optional[str] = None
    response_headers: dict[str, str] = field(default_factory=dict)
    response_body: Optional[str] = None

    def describe(self) -> str:
        """Multi-line description used for logs and abort messages."""
        status = f"HTTP {self.status}" if self.status is not None else "no response"
        lines = [
            f"{self.method} {self.url} failed: {status}" + (f" ({self.reason})" if self.reason else ""),
            "Request headers: " + json.dumps(self.request_headers, sort_keys=True),
            f"Request body: {self.request_body or '<empty>'}",
            "Response headers: " + json.dumps(self.response_headers, sort_keys=True),
            f"Response body: {self.response_body or '<empty>'}",
        ]
        return "\n".join(lines)


@dataclass
class ApiResponse:
    """Result of an API call; ``error`` is set for every non-success."""
    status: Optional[int]
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    error: Optional[ApiCallError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _redact(headers: dict[str, str]) -> dict[str, str]:
    redacted = dict(headers)
    auth = redacted.get("Authorization")
    if auth and auth.startswith("Bearer "):
        redacted["Authorization"] = f"Bearer {auth[7:23]}..."
    return redacted


def _decode_body(raw: bytes) -> Any:
    text = raw.decode("utf-8", errors="replace")
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


class TradingApiClient:
    """
    Issues the three calls the harness needs.

    HTTP and network failures are returned as ``ApiResponse.error``
    rather than raised, so provisioning and the worker pool can each
    decide whether a failure is fatal.
    """

    def __init__(
        self,
        root_url: str,
        trader_signer: TraderTokenSigner,
        management_signer: ManagementTokenSigner,
        timeout_seconds: Optional[float] = None,
        opener: Optional[Callable[..., Any]] = None
    ):
        self.root_url = root_url.rstrip("/")
        self.trader_signer = trader_signer
        self.management_signer = management_signer
        self.timeout_seconds = timeout_seconds
        self._open = opener or urlopen

    def get_balances(self, trader: Trader) -> ApiResponse:
        """Read the trader's balances; the first call creates the trader remotely."""
        headers = {"Authorization": self.trader_signer.authorization_header(trader)}
        return self._request("GET", Peatio.ACCOUNT_BALANCES, headers=headers)

    def create_order(self, order: OrderRequest) -> ApiResponse:
        headers = {"Authorization": self.trader_signer.authorization_header(order.trader)}
        return self._request("POST", Peatio.MARKET_ORDERS, body=order.to_payload(), headers=headers)

    def create_deposit(
        self,
        trader: Trader,
        currency: str,
        amount: Union[Decimal, float, str],
        state: str = "accepted"
    ) -> ApiResponse:
        """Credit ``amount`` of ``currency`` to the trader through the management API."""
        data = {
            "uid": trader.uid,
            "currency": currency,
            "amount": str(amount),
            "state": state,
        }
        return self._request("POST", Peatio.DEPOSITS_NEW, body=self.management_signer.sign(data))

    def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None
    ) -> ApiResponse:
        url = f"{self.root_url}{path}"
        request_headers = {
            "Accept": "application/json",
            "User-Agent": "tradeload/1.0",
        }
        if headers:
            request_headers.update(headers)

        data = None
        body_str = None
        if body is not None:
            body_str = json.dumps(body, separators=(",", ":"))
            data = body_str.encode("utf-8")
            request_headers["Content-Type"] = "application/json"

        def failure(**kwargs: Any) -> ApiResponse:
            error = ApiCallError(
                method=method,
                url=url,
                request_headers=_redact(request_headers),
                request_body=body_str,
                **kwargs
            )
            return ApiResponse(
                status=error.status,
                headers=error.response_headers,
                body=error.response_body,
                error=error
            )

        try:
            req = Request(url, data=data, headers=request_headers, method=method)
            with self._open(req, timeout=self.timeout_seconds) as response:
                status = response.getcode()
                response_headers = dict(response.headers.items())
                raw = response.read()
        except HTTPError as e:
            try:
                err_body = e.read().decode("utf-8", errors="replace")
            except (OSError, http.client.HTTPException):
                err_body = None
            return failure(
                status=e.code,
                reason=str(e.reason),
                response_headers=dict(e.headers.items()) if e.headers else {},
                response_body=err_body,
            )
        except (URLError, socket.timeout, OSError) as e:
            reason = getattr(e, "reason", e)
            return failure(reason=f"Network error: {reason}")
        except http.client.HTTPException as e:
            return failure(reason=f"Malformed response: {type(e).__name__}: {e}")
        except ValueError as e:
            return failure(reason=f"Invalid request: {e}")

        if not 200 <= status < 300:
            return failure(
                status=status,
                response_headers=response_headers,
                response_body=raw.decode("utf-8", errors="replace"),
            )

        return ApiResponse(status=status, headers=response_headers, body=_decode_body(raw))
