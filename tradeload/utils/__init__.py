"""
Utility functions module.

Time Semantics:
- Report timestamps are UTC wall-clock datetimes
- Order latencies are measured with a monotonic clock, never wall-clock
"""
