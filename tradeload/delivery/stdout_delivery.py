"""Standard output report delivery mechanism."""

import json
import sys

from ..config.report_delivery import StdoutDeliveryConfig
from ..report.builder import Report
from .base import BaseReportDelivery, DeliveryResult, DeliveryStatus


class StdoutReportDelivery(BaseReportDelivery):
    """Prints the final throughput line, or the whole report as JSON."""

    def __init__(self, name: str, config: StdoutDeliveryConfig, stream=None):
        super().__init__(name, config)
        self.config: StdoutDeliveryConfig = config
        self.stream = stream

    def deliver(self, report: Report) -> DeliveryResult:
        """Deliver report to stdout."""
        stream = self.stream or sys.stdout
        try:
            print(self._format_report(report), file=stream, flush=True)
        except (OSError, ValueError) as e:
            self.logger.error(
                "Failed to print report",
                delivery_name=self.name,
                error=str(e)
            )
            return DeliveryResult(
                status=DeliveryStatus.FAILED,
                message=f"Stdout error: {str(e)}",
                error=e
            )

        return DeliveryResult(status=DeliveryStatus.SUCCESS, message="Printed to stdout")

    def _format_report(self, report: Report) -> str:
        if self.config.format == "json":
            return json.dumps(report.to_dict())
        return report.summary_line()

    def health_check(self) -> bool:
        """Check if stdout is available."""
        try:
            return (self.stream or sys.stdout).writable()
        except (OSError, ValueError):
            return False
