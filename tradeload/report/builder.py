"""Final run report."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import structlog

from ..config.defaults import RunParameters
from ..errors import ReportError
from ..stats.aggregator import StatisticsSnapshot

logger = structlog.get_logger(__name__)


class ReportStatus(Enum):
    """Whether derived statistics could be computed."""
    OK = "ok"
    INSUFFICIENT_DATA = "insufficient_data"


@dataclass(frozen=True)
class Report:
    """Immutable summary handed to the report sinks."""
    parameters: dict[str, Any]
    started_at: datetime
    completed_at: datetime
    elapsed_seconds: float
    completed: int
    failed: int
    status: ReportStatus
    reason: Optional[str] = None
    ops_per_second: Optional[float] = None
    latency_min: Optional[float] = None
    latency_max: Optional[float] = None
    latency_avg: Optional[float] = None
    terminated: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def insufficient_data(self) -> bool:
        return self.status is ReportStatus.INSUFFICIENT_DATA

    def to_dict(self) -> dict[str, Any]:
        """Serializable form written by the report sinks."""
        return {
            "options": self.parameters,
            "results": {
                "status": self.status.value,
                "reason": self.reason,
                "completed": self.completed,
                "failed": self.failed,
                "ops": self.ops_per_second,
                "times": {
                    "min": self.latency_min,
                    "max": self.latency_max,
                    "avg": self.latency_avg,
                },
            },
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "elapsed_seconds": self.elapsed_seconds,
            "terminated": self.terminated,
            **self.extra,
        }

    def summary_line(self) -> str:
        if self.insufficient_data:
            return f"Insufficient data: {self.reason} ({self.completed} orders, {self.failed} failed)"
        return (
            f"{self.completed} orders in {self.elapsed_seconds:.2f}s: "
            f"{self.ops_per_second:.2f} ops/s "
            f"(latency min {self.latency_min:.4f}s, max {self.latency_max:.4f}s, "
            f"avg {self.latency_avg:.4f}s, {self.failed} failed)"
        )


class ReportBuilder:
    """Derives throughput and latency figures for a finished run."""

    def __init__(self):
        self.logger = logger

    @staticmethod
    def throughput(count: int, elapsed_seconds: float) -> float:
        """Completed orders per second of load phase."""
        if count <= 0:
            raise ReportError("No orders completed", completed=count, elapsed_seconds=elapsed_seconds)
        if elapsed_seconds <= 0:
            raise ReportError("Load phase took no measurable time",
                              completed=count, elapsed_seconds=elapsed_seconds)
        return count / elapsed_seconds

    def build(
        self,
        params: RunParameters,
        stats: StatisticsSnapshot,
        started_at: datetime,
        completed_at: datetime,
        terminated: bool = False
    ) -> Report:
        """
        Build the report for a run.

        Args:
            params: Parameters of the run, echoed without credentials
            stats: Aggregate taken after all workers joined
            started_at: Start of the load phase (provisioning excluded)
            completed_at: End of the load phase
            terminated: Whether the run stopped on a shutdown request

        Returns:
            Report with status OK, or INSUFFICIENT_DATA and a reason when
            throughput or averages cannot be derived
        """
        elapsed = (completed_at - started_at).total_seconds()
        common = {
            "parameters": params.describe(),
            "started_at": started_at,
            "completed_at": completed_at,
            "elapsed_seconds": elapsed,
            "completed": stats.count,
            "failed": stats.failed,
            "latency_min": stats.min,
            "latency_max": stats.max,
            "terminated": terminated,
        }

        try:
            ops = self.throughput(stats.count, elapsed)
            average = stats.average
        except ReportError as e:
            self.logger.warning("Report has insufficient data", reason=str(e),
                                completed=stats.count, elapsed_seconds=elapsed)
            return Report(
                status=ReportStatus.INSUFFICIENT_DATA,
                reason=str(e),
                latency_avg=stats.total / stats.count if stats.has_samples else None,
                **common
            )

        return Report(
            status=ReportStatus.OK,
            ops_per_second=ops,
            latency_avg=average,
            **common
        )
