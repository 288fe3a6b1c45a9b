"""
Statistics module: thread-safe latency aggregation for completed orders.
"""
from .aggregator import StatisticsAggregator, StatisticsSnapshot, progress_interval

__all__ = ["StatisticsAggregator", "StatisticsSnapshot", "progress_interval"]
