"""
Run failure error classifications for unrecoverable errors.

These exceptions abort the whole run: nothing useful can be measured once
configuration is invalid or the trader population cannot be set up.
"""

from typing import Optional, Dict, Any


class RunFailureError(Exception):
    """Base class for failures that abort the run."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ConfigurationError(RunFailureError):
    """Invalid run parameters, detected before any external call."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []


class ProvisioningError(RunFailureError):
    """Trader creation or funding failed."""

    def __init__(self, message: str, trader_uid: Optional[str] = None,
                 diagnostic: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.trader_uid = trader_uid
        self.diagnostic = diagnostic

    def __str__(self) -> str:
        base = super().__str__()
        if self.diagnostic:
            return f"{base}\n{self.diagnostic}"
        return base
