"""
Trader provisioning.

Creates the synthetic trader population and funds it before the load
phase. Every failure here is fatal: a partially funded population would
make order failures indistinguishable from engine failures. A shutdown
request is checked before each trader is created or funded and aborts
provisioning the same way.
"""

import random
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Callable, Optional, Sequence, Union

import structlog

from ..api.client import ApiResponse, TradingApiClient
from ..data.grid import to_decimal
from ..data.models import Trader
from ..errors import ProvisioningError

logger = structlog.get_logger(__name__)

UID_PREFIX = "ID"
UID_HEX_DIGITS = 10


class TraderProvisioner:
    """Creates, materializes and funds a fixed set of traders."""

    def __init__(
        self,
        client: TradingApiClient,
        email_domain: str = "tradeload.test",
        max_workers: int = 1,
        rng: Optional[random.Random] = None,
        is_cancelled: Optional[Callable[[], bool]] = None
    ):
        self.client = client
        self.email_domain = email_domain
        self.max_workers = max_workers
        self.logger = logger
        self._rng = rng or random.SystemRandom()
        self._is_cancelled = is_cancelled or (lambda: False)
        self._lock = threading.Lock()
        self._issued: set[str] = set()
        self._traders: Optional[tuple[Trader, ...]] = None

    @property
    def issued_count(self) -> int:
        with self._lock:
            return len(self._issued)

    def new_trader(self) -> Trader:
        """Create a local trader identity with a uid unique within this run."""
        with self._lock:
            uid = self._draw_uid()
            while uid in self._issued:
                uid = self._draw_uid()
            self._issued.add(uid)
        return Trader(email=f"{uid.lower()}@{self.email_domain}", uid=uid)

    def _draw_uid(self) -> str:
        return f"{UID_PREFIX}{self._rng.getrandbits(UID_HEX_DIGITS * 4):0{UID_HEX_DIGITS}X}"

    def materialize(self, trader: Trader) -> Trader:
        """Create the trader remotely through its first authenticated read."""
        response = self.client.get_balances(trader)
        self._ensure_ok(response, trader, "Trader creation failed")
        return trader

    def _check_cancelled(self) -> None:
        if self._is_cancelled():
            self.logger.warning("Provisioning interrupted", issued=self.issued_count)
            raise ProvisioningError("Provisioning interrupted by shutdown request")

    def _create_one(self) -> Trader:
        self._check_cancelled()
        return self.materialize(self.new_trader())

    def provision(self, count: int) -> list[Trader]:
        """Create ``count`` traders, in parallel when max_workers > 1."""
        if self.max_workers <= 1:
            traders = [self._create_one() for _ in range(count)]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers,
                                    thread_name_prefix="provision") as executor:
                futures = [executor.submit(self._create_one) for _ in range(count)]
                try:
                    traders = [future.result() for future in futures]
                except ProvisioningError:
                    for future in futures:
                        future.cancel()
                    raise

        self.logger.info("Traders created", count=len(traders))
        return traders

    def fund(
        self,
        trader: Trader,
        currencies: Sequence[str],
        amount: Union[Decimal, float, str]
    ) -> None:
        """Deposit ``amount`` of every currency to ``trader``."""
        self._check_cancelled()
        value = to_decimal(amount)
        for currency in currencies:
            response = self.client.create_deposit(trader, currency, value)
            self._ensure_ok(response, trader, f"Funding {currency} failed")

    def provision_and_fund(
        self,
        count: int,
        currencies: Sequence[str],
        amount: Union[Decimal, float, str]
    ) -> tuple[Trader, ...]:
        """
        Build the funded trader population once per run.

        Later calls return the cached population without touching the API.
        """
        if self._traders is not None:
            return self._traders

        traders = self.provision(count)

        if self.max_workers <= 1:
            for trader in traders:
                self.fund(trader, currencies, amount)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers,
                                    thread_name_prefix="fund") as executor:
                futures = [executor.submit(self.fund, trader, currencies, amount) for trader in traders]
                try:
                    for future in futures:
                        future.result()
                except ProvisioningError:
                    for future in futures:
                        future.cancel()
                    raise

        self.logger.info(
            "Traders funded",
            count=len(traders),
            currencies=list(currencies),
            amount=str(amount)
        )
        self._traders = tuple(traders)
        return self._traders

    def _ensure_ok(self, response: ApiResponse, trader: Trader, message: str) -> None:
        if response.ok:
            return
        diagnostic = response.error.describe() if response.error else None
        self.logger.error(message, uid=trader.uid, status=response.status)
        raise ProvisioningError(
            f"{message} for trader {trader.uid}",
            trader_uid=trader.uid,
            diagnostic=diagnostic,
            context={"status": response.status}
        )
