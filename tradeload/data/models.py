"""Records exchanged between provisioning, the worker pool and statistics."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..errors import RequestError


class OrderSide(Enum):
    """Order direction."""
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Trader:
    """A synthetic trading identity, immutable once provisioned."""
    email: str
    uid: str
    level: int = 3
    state: str = "active"


@dataclass(frozen=True)
class OrderRequest:
    """One sampled order attempt."""
    side: OrderSide
    market: str
    volume: Decimal
    price: Decimal
    trader: Trader

    def to_payload(self) -> dict[str, str]:
        """Body of the market order request."""
        return {
            "side": self.side.value,
            "market": self.market,
            "volume": str(self.volume),
            "price": str(self.price),
        }


@dataclass(frozen=True)
class OrderOutcome:
    """Result of a single order round trip."""
    latency: float
    success: bool
    error: Optional["RequestError"] = None
