"""Default configuration parameters for a load run."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class GridRange:
    """Inclusive value range sampled by the order generator."""
    min: float
    max: float
    step: float


@dataclass(frozen=True)
class CredentialParams:
    """Signing material for trader and management tokens."""
    trader_key: str = ""                              # PEM private key for trader sessions
    trader_algorithm: str = "RS256"
    management_keys: dict[str, str] = field(default_factory=dict)  # signer name -> PEM
    management_algorithm: str = "RS256"
    issuer: str = "barong"
    audience: str = "peatio"
    management_issuer: str = "tradeload"
    token_ttl_seconds: int = 60


@dataclass(frozen=True)
class RunParameters:
    """Complete, validated parameters of one load run."""
    root_url: str
    currencies: tuple[str, ...]
    markets: tuple[str, ...]
    traders: int
    orders: int
    workers: int
    volume: GridRange
    price: GridRange
    credentials: CredentialParams
    report_path: Optional[str] = None

    # Provisioning
    funding_amount: float = 1_000_000_000.0           # Credited per trader per currency
    provisioning_workers: int = 1
    email_domain: str = "tradeload.test"

    # Transport
    request_timeout_seconds: Optional[float] = None   # None: wait as long as the API takes

    # Progress output
    progress_percent: float = 0.01                    # Fraction of target between reports
    progress_cap: int = 100                           # Never report less often than this

    def describe(self) -> dict:
        """Parameters echoed into the report; credentials are left out."""
        return {
            "root_url": self.root_url,
            "currencies": list(self.currencies),
            "markets": list(self.markets),
            "traders": self.traders,
            "orders": self.orders,
            "workers": self.workers,
            "volume": {"min": self.volume.min, "max": self.volume.max, "step": self.volume.step},
            "price": {"min": self.price.min, "max": self.price.max, "step": self.price.step},
            "report_path": self.report_path,
        }


def get_default_config() -> dict:
    """Get the default run configuration as a plain mapping."""
    return {
        "root_url": "http://localhost:8000",
        "currencies": ["usd", "btc"],
        "markets": ["btcusd"],
        "traders": 10,
        "orders": 1000,
        "workers": 4,
        "volume": {"min": 1.0, "max": 100.0, "step": 1.0},
        "price": {"min": 0.5, "max": 1.5, "step": 0.1},
        "credentials": {
            "trader_key": None,
            "trader_algorithm": "RS256",
            "management_keys": {},
            "management_algorithm": "RS256",
            "issuer": "barong",
            "audience": "peatio",
            "management_issuer": "tradeload",
            "token_ttl_seconds": 60,
        },
        "report_path": None,
        "funding_amount": 1_000_000_000.0,
        "provisioning_workers": 1,
        "email_domain": "tradeload.test",
        "request_timeout_seconds": None,
        "progress_percent": 0.01,
        "progress_cap": 100,
    }
