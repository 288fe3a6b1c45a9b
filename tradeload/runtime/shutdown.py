"""
Signal-driven shutdown for the load phase.

Graceful shutdown is cooperative: the first termination signal sets a
flag that workers poll before starting each iteration, and requests
already in flight run to completion. A second interrupt is the escape
hatch: it terminates the process at once with FORCED_EXIT_CODE and
abandons in-flight requests without cleanup.
"""

import os
import signal
import threading
from typing import Any, Callable, Iterable, Optional

import structlog

logger = structlog.get_logger(__name__)

FORCED_EXIT_CODE = 130

DEFAULT_SIGNAL_NAMES = ("SIGINT", "SIGTERM", "SIGHUP", "SIGQUIT")


def default_signals() -> list[signal.Signals]:
    """Termination signals available on this platform."""
    return [getattr(signal, name) for name in DEFAULT_SIGNAL_NAMES if hasattr(signal, name)]


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


class ShutdownCoordinator:
    """Cancellation flag for the worker pool, driven by termination signals."""

    def __init__(
        self,
        interrupt_signal: int = signal.SIGINT,
        exit_func: Callable[[int], Any] = os._exit,
        forced_exit_code: int = FORCED_EXIT_CODE
    ):
        self.interrupt_signal = interrupt_signal
        self.forced_exit_code = forced_exit_code
        self.interrupt_count = 0
        self.reason: Optional[str] = None
        self.logger = logger
        self._exit = exit_func
        self._event = threading.Event()
        self._lock = threading.RLock()
        self._previous: dict[int, Any] = {}

    @property
    def terminating(self) -> bool:
        return self._event.is_set()

    def install(self, signals: Optional[Iterable[int]] = None) -> None:
        """Register handlers; must run on the main thread."""
        for signum in (default_signals() if signals is None else signals):
            self._previous[signum] = signal.signal(signum, self._handle)

    def restore(self) -> None:
        """Reinstall the handlers that were active before install()."""
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()

    def _handle(self, signum: int, frame: Any) -> None:
        self.handle_signal(signum)

    def handle_signal(self, signum: int) -> None:
        """Apply the two-stage policy to one received signal."""
        if signum == self.interrupt_signal:
            with self._lock:
                self.interrupt_count += 1
                count = self.interrupt_count
            if count >= 2:
                self.logger.warning(
                    "Second interrupt received, exiting immediately",
                    exit_code=self.forced_exit_code
                )
                self._exit(self.forced_exit_code)
                return

        self.request_shutdown(_signal_name(signum))

    def request_shutdown(self, reason: str = "requested") -> bool:
        """
        Stop new iterations from starting.

        Returns:
            True if this call initiated shutdown, False if it was already underway
        """
        with self._lock:
            if self._event.is_set():
                return False
            self.reason = reason
            self._event.set()

        self.logger.warning(
            "Shutting down gracefully, waiting for in-flight orders",
            reason=reason,
            hint="interrupt again to exit immediately"
        )
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)
