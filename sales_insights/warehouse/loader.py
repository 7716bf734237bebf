"""
Warehouse Loader

Read-only access to the star schema: the sales fact table and the customer
and product dimensions. Tables can be supplied as frames, read from a
directory of CSV/Parquet files, or read from a SQL database.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import polars as pl
import structlog
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from sales_insights.config import get_settings
from sales_insights.exceptions import TableLoadError
from .schema import CUSTOMERS_SCHEMA, PRODUCTS_SCHEMA, SALES_SCHEMA, TableSchema

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SalesWarehouse:
    """
    Loaded star schema.

    Frames are conformed to their declared schemas on construction through
    the ``from_*`` constructors and are never mutated by the reports.

    Example:
        warehouse = SalesWarehouse.from_directory("./data/gold")
        report = key_metrics(warehouse)
    """
    sales: pl.DataFrame
    customers: pl.DataFrame
    products: pl.DataFrame

    @classmethod
    def from_frames(
        cls,
        sales: pl.DataFrame,
        customers: Optional[pl.DataFrame] = None,
        products: Optional[pl.DataFrame] = None,
        validate: Optional[bool] = None,
    ) -> "SalesWarehouse":
        """
        Build a warehouse from in-memory frames.

        Missing dimension tables are treated as empty, so every fact row is
        unmatched.
        """
        warehouse = cls(
            sales=SALES_SCHEMA.conform(sales),
            customers=CUSTOMERS_SCHEMA.conform(customers) if customers is not None else CUSTOMERS_SCHEMA.empty(),
            products=PRODUCTS_SCHEMA.conform(products) if products is not None else PRODUCTS_SCHEMA.empty(),
        )
        warehouse._after_load(validate)
        return warehouse

    @classmethod
    def from_directory(
        cls,
        data_dir: Optional[Union[str, Path]] = None,
        file_format: Optional[str] = None,
        validate: Optional[bool] = None,
    ) -> "SalesWarehouse":
        """
        Read ``<table>.<format>`` files from a directory.

        Args:
            data_dir: Directory with the table files (defaults to settings)
            file_format: "csv" or "parquet" (defaults to settings)
            validate: Run data quality checks (defaults to settings)
        """
        config = get_settings().warehouse
        directory = Path(data_dir or config.data_dir)
        file_format = (file_format or config.file_format).lower()

        frames = {}
        for schema, table in _table_names(config):
            path = directory / f"{table}.{file_format}"
            frames[schema.name] = _read_file(path, file_format)

        logger.info("Loaded warehouse files", directory=str(directory), format=file_format)

        return cls.from_frames(
            frames[SALES_SCHEMA.name],
            frames[CUSTOMERS_SCHEMA.name],
            frames[PRODUCTS_SCHEMA.name],
            validate=validate,
        )

    @classmethod
    def from_database(
        cls,
        database_url: Optional[str] = None,
        db_schema: Optional[str] = None,
        validate: Optional[bool] = None,
    ) -> "SalesWarehouse":
        """
        Bulk read the three tables from a SQL database.

        Args:
            database_url: SQLAlchemy URL (defaults to settings)
            db_schema: Schema qualifying the table names; empty string for none
            validate: Run data quality checks (defaults to settings)
        """
        config = get_settings().warehouse
        url = database_url or config.database_url
        if not url:
            raise TableLoadError("No database URL configured")

        schema_name = config.db_schema if db_schema is None else db_schema

        engine = create_engine(url)
        frames = {}
        try:
            with engine.connect() as conn:
                for schema, table in _table_names(config):
                    qualified = f"{schema_name}.{table}" if schema_name else table
                    try:
                        frames[schema.name] = pl.read_database(f"SELECT * FROM {qualified}", connection=conn)
                    except SQLAlchemyError as e:
                        raise TableLoadError("Query failed", source=qualified, original_error=e) from e
                    logger.debug("Read table", table=qualified, rows=len(frames[schema.name]))
        except SQLAlchemyError as e:
            raise TableLoadError("Connection failed", source=engine.url.render_as_string(), original_error=e) from e
        finally:
            engine.dispose()

        logger.info("Loaded warehouse tables", schema=schema_name or None)

        return cls.from_frames(
            frames[SALES_SCHEMA.name],
            frames[CUSTOMERS_SCHEMA.name],
            frames[PRODUCTS_SCHEMA.name],
            validate=validate,
        )

    def _after_load(self, validate: Optional[bool]) -> None:
        logger.info("Warehouse ready", **self.row_counts())

        if validate is None:
            validate = get_settings().warehouse.validate_on_load
        if validate:
            from sales_insights.quality import validate_warehouse
            validate_warehouse(self)

    def row_counts(self) -> Dict[str, int]:
        """Number of rows per table"""
        return {
            "sales": len(self.sales),
            "customers": len(self.customers),
            "products": len(self.products),
        }


def _table_names(config) -> List[Tuple[TableSchema, str]]:
    return [
        (SALES_SCHEMA, config.sales_table),
        (CUSTOMERS_SCHEMA, config.customers_table),
        (PRODUCTS_SCHEMA, config.products_table),
    ]


def _read_file(path: Path, file_format: str) -> pl.DataFrame:
    """Read one table file"""
    started_at = datetime.now(timezone.utc)

    try:
        if file_format == "csv":
            df = pl.read_csv(path, try_parse_dates=True)
        elif file_format == "parquet":
            df = pl.read_parquet(path)
        else:
            raise TableLoadError(f"Unsupported file format: {file_format}", source=str(path))
    except (OSError, pl.exceptions.PolarsError) as e:
        raise TableLoadError("Read failed", source=str(path), original_error=e) from e

    logger.debug(
        "Read table file",
        path=str(path),
        rows=len(df),
        duration_seconds=(datetime.now(timezone.utc) - started_at).total_seconds(),
    )
    return df
