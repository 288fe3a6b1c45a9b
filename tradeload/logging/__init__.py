"""
Logging configuration and utilities for the load harness.
"""
from .config import configure_logging, get_logger, get_worker_logger

__all__ = ["configure_logging", "get_logger", "get_worker_logger"]
