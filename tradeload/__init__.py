"""
tradeload - Trading Engine Load Generation Harness

Drives synthetic trading activity against a remote trading-engine API to
measure sustained order-submission throughput and latency under concurrency.
"""

__version__ = "0.1.0"
__author__ = "tradeload Team"
