"""Configuration for report delivery mechanisms."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class DeliveryMethod(Enum):
    """Supported report delivery methods."""
    FILE_OUTPUT = "file_output"
    STDOUT = "stdout"


@dataclass(frozen=True)
class FileDeliveryConfig:
    """Configuration for file-based delivery."""
    output_path: str
    format: Optional[str] = None  # yaml, json; None picks from the file suffix
    create_dirs: bool = True

    def resolved_format(self) -> str:
        if self.format:
            return self.format
        suffix = Path(self.output_path).suffix.lower()
        return "yaml" if suffix in (".yml", ".yaml") else "json"


@dataclass(frozen=True)
class StdoutDeliveryConfig:
    """Configuration for stdout delivery."""
    format: str = "summary"  # summary, json


@dataclass(frozen=True)
class DeliveryDestination:
    """Single report delivery destination."""
    name: str
    method: DeliveryMethod
    config: Any  # FileDeliveryConfig | StdoutDeliveryConfig
    enabled: bool = True


def get_default_destinations(report_path: Optional[str] = None) -> list[DeliveryDestination]:
    """Console summary always; a report file when a path is configured."""
    destinations = [
        DeliveryDestination(
            name="stdout",
            method=DeliveryMethod.STDOUT,
            config=StdoutDeliveryConfig(format="summary"),
        )
    ]
    if report_path:
        destinations.append(DeliveryDestination(
            name="file",
            method=DeliveryMethod.FILE_OUTPUT,
            config=FileDeliveryConfig(output_path=report_path),
        ))
    return destinations
