"""
Custom exceptions for Sales Insights.

Errors raised while loading the star-schema tables, computing reports and
writing them out.
"""

from pathlib import Path
from typing import List, Optional


class SalesInsightsError(Exception):
    """Base exception for all sales insights errors."""

    pass


class SchemaError(SalesInsightsError):
    """Raised when a source table does not match its declared schema."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        missing_columns: Optional[List[str]] = None,
    ):
        self.table = table
        self.missing_columns = missing_columns or []

        error_parts = [message]
        if table:
            error_parts.append(f"Table: {table}")
        if self.missing_columns:
            error_parts.append(f"Missing columns: {', '.join(self.missing_columns)}")

        super().__init__(" | ".join(error_parts))


class TableLoadError(SalesInsightsError):
    """Raised when a source table cannot be read."""

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.source = source
        self.original_error = original_error

        if source:
            message = f"Error loading table from '{source}': {message}"

        if original_error:
            message = f"{message} (Original error: {original_error})"

        super().__init__(message)


class ZeroTotalError(SalesInsightsError, ZeroDivisionError):
    """Raised when a share of a total is requested and the total is zero."""

    def __init__(self, measure: str):
        self.measure = measure
        super().__init__(f"Cannot compute percentage of total: overall {measure} is zero")


class ExportError(SalesInsightsError):
    """Raised when a report cannot be written."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        if path:
            message = f"{message} (path: {path})"
        super().__init__(message)
