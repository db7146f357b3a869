"""
Report formatters for detected peaks.

Provides console and JSON renderings of ranked peaks.
"""
from formatters.peak_report import PeakReportFormatter

__all__ = ["PeakReportFormatter"]
