"""Base classes for report delivery mechanisms."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import structlog

from ..config.report_delivery import DeliveryDestination, DeliveryMethod
from ..report.builder import Report


class DeliveryStatus(Enum):
    """Report delivery status."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class DeliveryResult:
    """Result of a report delivery attempt."""
    status: DeliveryStatus
    message: Optional[str] = None
    error: Optional[Exception] = None


class ReportDeliveryError(Exception):
    """Report delivery could not be configured."""
    pass


class BaseReportDelivery(ABC):
    """Base class for report delivery mechanisms."""

    def __init__(self, name: str, config: Any):
        self.name = name
        self.config = config
        self.logger = structlog.get_logger(f"report.delivery.{name}")

    @abstractmethod
    def deliver(self, report: Report) -> DeliveryResult:
        """
        Deliver the report to the configured destination.

        Args:
            report: Final run report

        Returns:
            Delivery result
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """Check if delivery mechanism is healthy."""
        pass


def create_delivery(destination: DeliveryDestination) -> BaseReportDelivery:
    """Instantiate the delivery for a configured destination."""
    from .file_delivery import FileReportDelivery
    from .stdout_delivery import StdoutReportDelivery

    if destination.method is DeliveryMethod.STDOUT:
        return StdoutReportDelivery(destination.name, destination.config)
    if destination.method is DeliveryMethod.FILE_OUTPUT:
        return FileReportDelivery(destination.name, destination.config)
    raise ReportDeliveryError(f"Unsupported delivery method: {destination.method}")
