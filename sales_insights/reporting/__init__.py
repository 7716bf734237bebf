"""
Reporting Module
"""
from .exporter import ExportFormat, ReportExporter
from .runner import REPORTS, ReportResult, ReportStatus, SalesReportRunner

__all__ = [
    "ExportFormat",
    "ReportExporter",
    "REPORTS",
    "ReportResult",
    "ReportStatus",
    "SalesReportRunner",
]
