"""
Year-over-Year Engine

Yearly performance of every product, compared with the product's average
yearly sales and with its previous year present in the data.
"""

from enum import Enum
from typing import Optional

import polars as pl
import structlog

from .aggregation import join_dimension

logger = structlog.get_logger(__name__)

YOY_COLUMNS = [
    "order_year",
    "product_name",
    "current_sales",
    "avg_sales",
    "diff_avg",
    "avg_change",
    "previous_year",
    "diff_prev_yr",
    "prev_yr_change",
]


class AverageChange(str, Enum):
    """Position of a year's sales relative to the product average"""
    ABOVE = "Above avg"
    BELOW = "Below avg"
    AVERAGE = "Avg"

    @classmethod
    def classify(cls, diff_avg: float) -> "AverageChange":
        if diff_avg > 0:
            return cls.ABOVE
        if diff_avg < 0:
            return cls.BELOW
        return cls.AVERAGE

    @classmethod
    def expr(cls, diff_avg: pl.Expr) -> pl.Expr:
        return (
            pl.when(diff_avg > 0).then(pl.lit(cls.ABOVE.value))
            .when(diff_avg < 0).then(pl.lit(cls.BELOW.value))
            .otherwise(pl.lit(cls.AVERAGE.value))
        )


class YearChange(str, Enum):
    """Direction of a year's sales relative to the preceding year"""
    INCREASE = "Increase"
    DECREASE = "Decrease"
    NO_CHANGE = "No change"

    @classmethod
    def classify(cls, diff_prev_yr: Optional[float]) -> Optional["YearChange"]:
        """None when there is no preceding year to compare with"""
        if diff_prev_yr is None:
            return None
        if diff_prev_yr > 0:
            return cls.INCREASE
        if diff_prev_yr < 0:
            return cls.DECREASE
        return cls.NO_CHANGE

    @classmethod
    def expr(cls, diff_prev_yr: pl.Expr) -> pl.Expr:
        return (
            pl.when(diff_prev_yr.is_null()).then(pl.lit(None, dtype=pl.Utf8))
            .when(diff_prev_yr > 0).then(pl.lit(cls.INCREASE.value))
            .when(diff_prev_yr < 0).then(pl.lit(cls.DECREASE.value))
            .otherwise(pl.lit(cls.NO_CHANGE.value))
        )


def yearly_product_sales(sales: pl.DataFrame, products: pl.DataFrame) -> pl.DataFrame:
    """
    Sales per (order_year, product_name), sorted by product then year.

    Facts without an order date are excluded; facts whose product does not
    resolve are grouped under a null product name.
    """
    return (
        join_dimension(sales, products, on="product_key", columns=["product_name"])
        .filter(pl.col("order_date").is_not_null())
        .group_by(pl.col("order_date").dt.year().alias("order_year"), "product_name")
        .agg(pl.col("sales_amount").sum().alias("current_sales"))
        .sort(["product_name", "order_year"], nulls_last=False)
    )


def product_yoy(sales: pl.DataFrame, products: pl.DataFrame) -> pl.DataFrame:
    """
    Compare each product's yearly sales to its average and previous year.

    Within each product the years are sorted ascending; ``avg_sales`` is the
    mean over all of the product's years and ``previous_year`` is the sales
    of the preceding row (the previous year present in the data, not
    necessarily the previous calendar year).

    Returns:
        Rows ordered by (product_name, order_year) with the columns
        listed in ``YOY_COLUMNS``
    """
    yearly = yearly_product_sales(sales, products)

    current = pl.col("current_sales")
    result = (
        yearly.with_columns(
            current.mean().over("product_name").alias("avg_sales"),
            current.shift(1).over("product_name").alias("previous_year"),
        )
        .with_columns(
            (current - pl.col("avg_sales")).alias("diff_avg"),
            (current - pl.col("previous_year")).alias("diff_prev_yr"),
        )
        .with_columns(
            AverageChange.expr(pl.col("diff_avg")).alias("avg_change"),
            YearChange.expr(pl.col("diff_prev_yr")).alias("prev_yr_change"),
        )
        .select(YOY_COLUMNS)
    )

    logger.debug(
        "Year-over-year computed",
        products=result["product_name"].n_unique(),
        rows=len(result),
    )
    return result
