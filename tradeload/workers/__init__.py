"""
Worker pool module: parallel order submission for the load phase.
"""
from .pool import WorkerPool

__all__ = ["WorkerPool"]
