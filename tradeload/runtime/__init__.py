"""
Runtime control: signal-driven shutdown of the load phase.
"""
from .shutdown import FORCED_EXIT_CODE, ShutdownCoordinator

__all__ = ["FORCED_EXIT_CODE", "ShutdownCoordinator"]
