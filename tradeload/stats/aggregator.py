"""Thread-safe statistics for completed orders."""

import math
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from ..errors import ReportError

ProgressCallback = Callable[[int], None]


def progress_interval(target: int, percent: float = 0.01, cap: int = 100) -> int:
    """Completions between progress reports: ceil(target * percent), at least 1, at most ``cap``."""
    return min(max(math.ceil(target * percent), 1), cap)


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Read-only view of the aggregate, taken after the workers joined."""
    count: int
    min: Optional[float]
    max: Optional[float]
    total: float
    failed: int = 0

    @property
    def has_samples(self) -> bool:
        return self.count > 0

    @property
    def average(self) -> float:
        if self.count == 0:
            raise ReportError("No samples recorded", completed=0)
        return self.total / self.count


class StatisticsAggregator:
    """
    Collects order latencies from every worker under a single lock.

    The progress callback runs while the lock is held, so the count it
    receives is exactly the count at the time it prints.
    """

    def __init__(
        self,
        progress_every: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None
    ):
        self._lock = threading.Lock()
        self._count = 0
        self._failed = 0
        self._min: Optional[float] = None
        self._max: Optional[float] = None
        self._total = 0.0
        self.progress_every = progress_every
        self.on_progress = on_progress

    @property
    def completed(self) -> int:
        # Unlocked read; a stale value only delays the stop check by one iteration.
        return self._count

    def record(self, latency: float) -> int:
        """Add one successful order; returns the new completed count."""
        with self._lock:
            self._count += 1
            self._total += latency
            if self._min is None or latency < self._min:
                self._min = latency
            if self._max is None or latency > self._max:
                self._max = latency

            count = self._count
            if self.on_progress and self.progress_every and count % self.progress_every == 0:
                self.on_progress(count)
            return count

    def record_failure(self) -> None:
        with self._lock:
            self._failed += 1

    def snapshot(self) -> StatisticsSnapshot:
        return StatisticsSnapshot(
            count=self._count,
            min=self._min,
            max=self._max,
            total=self._total,
            failed=self._failed,
        )
