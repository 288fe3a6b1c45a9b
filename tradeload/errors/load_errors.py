"""
Recoverable error classifications for the load phase and reporting.

A failed order attempt is discarded and the worker moves on; a report
without enough data is still produced, flagged instead of filled with
numeric artifacts.
"""

from typing import Optional, Dict, Any


class LoadPhaseError(Exception):
    """Base class for errors that are contained and do not abort the run."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class RequestError(LoadPhaseError):
    """A single order submission failed."""

    def __init__(self, message: str, order: Optional[Any] = None,
                 diagnostic: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.order = order
        self.diagnostic = diagnostic


class ReportError(LoadPhaseError):
    """Not enough data to derive report statistics."""

    def __init__(self, message: str, completed: Optional[int] = None,
                 elapsed_seconds: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.completed = completed
        self.elapsed_seconds = elapsed_seconds
