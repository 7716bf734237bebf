"""
Star Schema Definitions

Declared columns and dtypes of the sales fact table and the customer and
product dimensions, plus coercion of loaded frames onto them.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet

import polars as pl
import structlog

from sales_insights.exceptions import SchemaError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TableSchema:
    """Column layout of one warehouse table"""
    name: str
    columns: Dict[str, pl.DataType]
    key: str
    # Columns filled with nulls when the source does not provide them
    optional: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def required(self) -> list:
        return [c for c in self.columns if c not in self.optional]

    def conform(self, df: pl.DataFrame) -> pl.DataFrame:
        """
        Select and cast the declared columns of ``df``.

        Extra source columns are dropped, missing optional columns are added
        as nulls and every column is cast to its declared dtype.

        Raises:
            SchemaError: If a required column is missing or cannot be cast
        """
        missing = [c for c in self.required if c not in df.columns]
        if missing:
            raise SchemaError(
                "Required columns not found",
                table=self.name,
                missing_columns=missing,
            )

        exprs = []
        for column, dtype in self.columns.items():
            if column not in df.columns:
                exprs.append(pl.lit(None, dtype=dtype).alias(column))
                continue

            source_dtype = df.schema[column]
            if source_dtype == dtype:
                exprs.append(pl.col(column))
            elif dtype == pl.Date and source_dtype == pl.Utf8:
                exprs.append(pl.col(column).str.to_date().alias(column))
            elif dtype == pl.Date and isinstance(source_dtype, pl.Datetime):
                exprs.append(pl.col(column).dt.date().alias(column))
            else:
                exprs.append(pl.col(column).cast(dtype).alias(column))

        try:
            conformed = df.select(exprs)
        except pl.exceptions.PolarsError as e:
            raise SchemaError(f"Column coercion failed: {e}", table=self.name) from e

        dropped = [c for c in df.columns if c not in self.columns]
        if dropped:
            logger.debug("Dropped undeclared columns", table=self.name, columns=dropped)

        return conformed

    def empty(self) -> pl.DataFrame:
        """Empty frame with the declared schema"""
        return pl.DataFrame(schema=self.columns)


SALES_SCHEMA = TableSchema(
    name="fact_sales",
    columns={
        "order_number": pl.Utf8,
        "order_date": pl.Date,
        "customer_key": pl.Int64,
        "product_key": pl.Int64,
        "quantity": pl.Int64,
        "price": pl.Float64,
        "sales_amount": pl.Float64,
    },
    key="order_number",
)

CUSTOMERS_SCHEMA = TableSchema(
    name="dim_customers",
    columns={
        "customer_key": pl.Int64,
        "first_name": pl.Utf8,
        "last_name": pl.Utf8,
        "birthdate": pl.Date,
        "gender": pl.Utf8,
        "country": pl.Utf8,
    },
    key="customer_key",
    optional=frozenset({"first_name", "last_name"}),
)

PRODUCTS_SCHEMA = TableSchema(
    name="dim_products",
    columns={
        "product_key": pl.Int64,
        "product_name": pl.Utf8,
        "category": pl.Utf8,
        "subcategory": pl.Utf8,
        "cost": pl.Float64,
    },
    key="product_key",
    optional=frozenset({"subcategory"}),
)
