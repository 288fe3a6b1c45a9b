"""File-based report delivery mechanism."""

import json
from pathlib import Path

import yaml

from ..config.report_delivery import FileDeliveryConfig
from ..report.builder import Report
from .base import (
    BaseReportDelivery,
    DeliveryResult,
    DeliveryStatus,
    ReportDeliveryError,
)


class FileReportDelivery(BaseReportDelivery):
    """Writes the report as YAML or JSON."""

    def __init__(self, name: str, config: FileDeliveryConfig):
        super().__init__(name, config)
        self.config: FileDeliveryConfig = config
        self.output_path = Path(config.output_path)
        self.format = config.resolved_format()

        if self.format not in ("json", "yaml"):
            raise ReportDeliveryError(f"Unsupported format: {self.format}")

    def deliver(self, report: Report) -> DeliveryResult:
        """Write report to file."""
        try:
            if self.config.create_dirs:
                self.output_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.output_path, "w") as f:
                if self.format == "yaml":
                    yaml.safe_dump(report.to_dict(), f, default_flow_style=False, sort_keys=False)
                else:
                    json.dump(report.to_dict(), f, indent=2, default=str)

        except OSError as e:
            self.logger.warning(
                "Report file write failed",
                delivery_name=self.name,
                output_path=str(self.output_path),
                error=str(e)
            )
            return DeliveryResult(
                status=DeliveryStatus.FAILED,
                message=f"File system error: {str(e)}",
                error=e
            )

        self.logger.info(
            "Report written",
            delivery_name=self.name,
            output_path=str(self.output_path),
            format=self.format
        )
        return DeliveryResult(status=DeliveryStatus.SUCCESS, message=f"Written to {self.output_path}")

    def health_check(self) -> bool:
        """Check that the output directory exists or can be created."""
        parent = self.output_path.parent
        return parent.exists() or self.config.create_dirs
