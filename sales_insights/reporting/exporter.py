"""
Report Exporter

Writes report frames to the output directory as delimited text or Parquet.
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import polars as pl
import structlog

from sales_insights.config import get_settings
from sales_insights.exceptions import ExportError

logger = structlog.get_logger(__name__)


class ExportFormat(str, Enum):
    """Supported export formats"""
    CSV = "csv"
    PARQUET = "parquet"


class ReportExporter:
    """
    Writes reports under ``output_dir`` as ``<name>.<format>``.

    Example:
        exporter = ReportExporter("./reports", ExportFormat.PARQUET)
        path = exporter.export("product_yoy", df)
    """

    def __init__(
        self,
        output_dir: Optional[Union[str, Path]] = None,
        export_format: Optional[Union[ExportFormat, str]] = None,
        timestamped: bool = False,
    ):
        report_settings = get_settings().report
        self.output_dir = Path(output_dir or report_settings.output_dir)
        self.export_format = ExportFormat(export_format or report_settings.export_format)
        self.timestamped = timestamped

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError(f"Cannot create output directory: {e}", path=self.output_dir) from e

    def _path_for(self, name: str) -> Path:
        if self.timestamped:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
            name = f"{name}_{timestamp}"
        return self.output_dir / f"{name}.{self.export_format.value}"

    def export(self, name: str, df: pl.DataFrame) -> str:
        """
        Write one report.

        Returns:
            Path of the written file

        Raises:
            ExportError: If the file cannot be written
        """
        path = self._path_for(name)

        try:
            if self.export_format is ExportFormat.CSV:
                df.write_csv(path)
            else:
                df.write_parquet(path)
        except (OSError, pl.exceptions.PolarsError) as e:
            raise ExportError(f"Failed to write report '{name}': {e}", path=path) from e

        logger.info("Report exported", report=name, rows=len(df), path=str(path))
        return str(path)
