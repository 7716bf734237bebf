"""
Trend Engine

Change-over-time analysis of the sales fact table: per-period totals, plus
cumulative measures (running total, moving average price) computed by an
explicit sort-then-scan over the materialized period sequence.
"""

from enum import Enum
from typing import Union

import polars as pl
import structlog

logger = structlog.get_logger(__name__)


class Granularity(str, Enum):
    """Time truncation applied to order dates"""
    YEAR = "year"
    QUARTER = "quarter"
    MONTH = "month"

    @property
    def every(self) -> str:
        return {"year": "1y", "quarter": "1q", "month": "1mo"}[self.value]

    def truncate(self, column: str) -> pl.Expr:
        return pl.col(column).dt.truncate(self.every)


def total_column(measure: str) -> str:
    """Output name of the per-period sum of ``measure``"""
    return "total_sales" if measure == "sales_amount" else f"total_{measure}"


def period_trend(
    sales: pl.DataFrame,
    granularity: Union[Granularity, str] = Granularity.YEAR,
    measure: str = "sales_amount",
) -> pl.LazyFrame:
    """
    Lazy per-period aggregates of the fact table.

    Facts without an order date are excluded. One row per truncated period
    present in the data, ascending by ``period_start``, with the period sum
    of ``measure``, distinct customers, quantity sold and average price.
    """
    granularity = Granularity(granularity)

    aggs = [
        pl.col(measure).sum().alias(total_column(measure)),
        pl.col("customer_key").drop_nulls().n_unique().alias("total_customers"),
    ]
    # The measure total already is total_quantity when trending quantity
    if total_column(measure) != "total_quantity":
        aggs.append(pl.col("quantity").sum().alias("total_quantity"))
    aggs.append(pl.col("price").mean().alias("avg_price"))

    return (
        sales.lazy()
        .filter(pl.col("order_date").is_not_null())
        .group_by(granularity.truncate("order_date").alias("period_start"))
        .agg(aggs)
        .sort("period_start")
    )


def yearly_trend(sales: pl.DataFrame, measure: str = "sales_amount") -> pl.DataFrame:
    """Year-by-year sales, customers and quantity keyed by ``order_year``"""
    columns = [total_column(measure), "total_customers"]
    if "total_quantity" not in columns:
        columns.append("total_quantity")
    return (
        period_trend(sales, Granularity.YEAR, measure)
        .select(
            pl.col("period_start").dt.year().alias("order_year"),
            *columns,
        )
        .collect()
    )


def cumulative_trend(
    sales: pl.DataFrame,
    granularity: Union[Granularity, str] = Granularity.YEAR,
    measure: str = "sales_amount",
) -> pl.DataFrame:
    """
    Period totals with running total and moving average price.

    ``running_<total>`` is the prefix sum of the period totals and
    ``moving_avg_price`` the prefix mean of the per-period average prices,
    both in ascending period order.
    """
    total = total_column(measure)
    periods = period_trend(sales, granularity, measure).collect().sort("period_start")

    result = periods.with_columns(
        pl.col(total).cum_sum().alias(f"running_{total}"),
        (pl.col("avg_price").cum_sum() / pl.col("avg_price").cum_count())
        .forward_fill()
        .alias("moving_avg_price"),
    ).select(["period_start", total, f"running_{total}", "avg_price", "moving_avg_price"])

    logger.debug("Cumulative trend computed", granularity=Granularity(granularity).value, periods=len(result))
    return result
