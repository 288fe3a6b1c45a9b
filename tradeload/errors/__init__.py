"""
Error classification for the load harness.

Unrecoverable errors abort the run before or during setup; recoverable
errors are contained within a worker iteration or within report
construction.
"""

from .run_failures import (
    RunFailureError,
    ConfigurationError,
    ProvisioningError,
)
from .load_errors import (
    LoadPhaseError,
    RequestError,
    ReportError,
)

__all__ = [
    # Run failures
    "RunFailureError",
    "ConfigurationError",
    "ProvisioningError",
    # Load phase
    "LoadPhaseError",
    "RequestError",
    "ReportError",
]
