"""
Report delivery: console summary and report files.
"""
from .base import BaseReportDelivery, DeliveryResult, DeliveryStatus, create_delivery
from .file_delivery import FileReportDelivery
from .stdout_delivery import StdoutReportDelivery

__all__ = [
    "BaseReportDelivery",
    "DeliveryResult",
    "DeliveryStatus",
    "create_delivery",
    "FileReportDelivery",
    "StdoutReportDelivery",
]
