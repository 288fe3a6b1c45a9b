"""
Report module: final run summary built from parameters and statistics.
"""
from .builder import Report, ReportBuilder, ReportStatus

__all__ = ["Report", "ReportBuilder", "ReportStatus"]
