"""
Segmentation Engine

Rule-based classification of customers (VIP / Regular / New by spending and
order history) and products (cost bands), with membership counts.

Each classifier is an enum with a scalar ``classify`` function and a polars
expression built from the same thresholds.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import polars as pl
import structlog

from sales_insights.config import get_settings
from .aggregation import Measure, Reducer, aggregate

logger = structlog.get_logger(__name__)


# =============================================================================
# CUSTOMER SEGMENTS
# =============================================================================

@dataclass(frozen=True)
class SegmentRules:
    """Thresholds separating VIP, Regular and New customers"""
    min_lifespan_months: int = 12
    vip_spending_threshold: float = 5000.0

    @classmethod
    def from_settings(cls) -> "SegmentRules":
        report = get_settings().report
        return cls(
            min_lifespan_months=report.min_lifespan_months,
            vip_spending_threshold=report.vip_spending_threshold,
        )


class CustomerSegment(str, Enum):
    """Customer segment labels"""
    VIP = "VIP"
    REGULAR = "Regular"
    NEW = "New"

    @classmethod
    def classify(
        cls,
        lifespan_months: Optional[int],
        total_spending: Optional[float],
        rules: Optional[SegmentRules] = None,
    ) -> "CustomerSegment":
        """
        VIP: lifespan >= min months and spending above the threshold.
        Regular: lifespan >= min months and spending at or below it.
        New: everything else, including unknown lifespan or spending.
        """
        rules = rules or SegmentRules()
        if lifespan_months is None or total_spending is None:
            return cls.NEW
        if lifespan_months >= rules.min_lifespan_months:
            if total_spending > rules.vip_spending_threshold:
                return cls.VIP
            return cls.REGULAR
        return cls.NEW

    @classmethod
    def expr(
        cls,
        lifespan_months: pl.Expr,
        total_spending: pl.Expr,
        rules: Optional[SegmentRules] = None,
    ) -> pl.Expr:
        rules = rules or SegmentRules()
        established = lifespan_months >= rules.min_lifespan_months
        return (
            pl.when(established & (total_spending > rules.vip_spending_threshold))
            .then(pl.lit(cls.VIP.value))
            .when(established & (total_spending <= rules.vip_spending_threshold))
            .then(pl.lit(cls.REGULAR.value))
            .otherwise(pl.lit(cls.NEW.value))
        )


def month_diff(start: pl.Expr, end: pl.Expr) -> pl.Expr:
    """Calendar month boundaries crossed between two dates (day of month ignored)"""
    years = end.dt.year().cast(pl.Int32) - start.dt.year().cast(pl.Int32)
    months = end.dt.month().cast(pl.Int32) - start.dt.month().cast(pl.Int32)
    return years * 12 + months


def customer_spending(
    sales: pl.DataFrame,
    rules: Optional[SegmentRules] = None,
) -> pl.DataFrame:
    """
    Per-customer spending, order history and segment.

    Customers are identified by the fact table's ``customer_key``; facts
    without a customer key are skipped. A customer whose orders are all
    undated has a null lifespan and is classified New.
    """
    rules = rules or SegmentRules.from_settings()

    return (
        sales.filter(pl.col("customer_key").is_not_null())
        .group_by("customer_key")
        .agg(
            pl.col("sales_amount").sum().alias("total_spending"),
            pl.col("order_date").min().alias("first_order"),
            pl.col("order_date").max().alias("last_order"),
        )
        .with_columns(
            month_diff(pl.col("first_order"), pl.col("last_order")).alias("lifespan_months")
        )
        .with_columns(
            CustomerSegment.expr(
                pl.col("lifespan_months"), pl.col("total_spending"), rules
            ).alias("customer_segment")
        )
        .sort("customer_key")
    )


def customer_segment_counts(
    sales: pl.DataFrame,
    rules: Optional[SegmentRules] = None,
) -> pl.DataFrame:
    """Number of customers per segment, ascending by count"""
    segments = customer_spending(sales, rules)
    counts = aggregate(
        segments,
        by="customer_segment",
        measures=[Measure("customer_key", Reducer.COUNT, "total_customers")],
        descending=False,
    )

    logger.info(
        "Customers segmented",
        customers=len(segments),
        segments=dict(zip(counts["customer_segment"].to_list(), counts["total_customers"].to_list())),
    )
    return counts


# =============================================================================
# PRODUCT COST BANDS
# =============================================================================

class CostBandScheme(str, Enum):
    """
    How cost band boundaries are drawn.

    SOURCE keeps the historical bands literally: < 100, 101..500, 501..1000,
    everything else. Costs in [100, 101) and (500, 501) therefore fall into
    "Above 1000". CONTIGUOUS closes those gaps: < 100, 100..500,
    (500, 1000], above 1000.
    """
    SOURCE = "source"
    CONTIGUOUS = "contiguous"


class CostRange(str, Enum):
    """Product cost band labels"""
    BELOW_100 = "Below 100"
    FROM_101_TO_500 = "101-500"
    FROM_501_TO_1000 = "501-1000"
    ABOVE_1000 = "Above 1000"

    @classmethod
    def classify(
        cls,
        cost: Optional[float],
        scheme: Union[CostBandScheme, str] = CostBandScheme.SOURCE,
    ) -> "CostRange":
        scheme = CostBandScheme(scheme)
        if cost is None:
            return cls.ABOVE_1000
        if cost < 100:
            return cls.BELOW_100
        if scheme is CostBandScheme.SOURCE:
            if 101 <= cost <= 500:
                return cls.FROM_101_TO_500
            if 501 <= cost <= 1000:
                return cls.FROM_501_TO_1000
            return cls.ABOVE_1000
        if cost <= 500:
            return cls.FROM_101_TO_500
        if cost <= 1000:
            return cls.FROM_501_TO_1000
        return cls.ABOVE_1000

    @classmethod
    def expr(
        cls,
        cost: pl.Expr,
        scheme: Union[CostBandScheme, str] = CostBandScheme.SOURCE,
    ) -> pl.Expr:
        scheme = CostBandScheme(scheme)
        if scheme is CostBandScheme.SOURCE:
            middle = cost.is_between(101, 500)
            upper = cost.is_between(501, 1000)
        else:
            middle = cost <= 500
            upper = cost <= 1000
        return (
            pl.when(cost < 100).then(pl.lit(cls.BELOW_100.value))
            .when(middle).then(pl.lit(cls.FROM_101_TO_500.value))
            .when(upper).then(pl.lit(cls.FROM_501_TO_1000.value))
            .otherwise(pl.lit(cls.ABOVE_1000.value))
        )


def _scheme(scheme: Optional[Union[CostBandScheme, str]]) -> CostBandScheme:
    if scheme is None:
        return CostBandScheme(get_settings().report.cost_band_scheme)
    return CostBandScheme(scheme)


def product_cost_segments(
    products: pl.DataFrame,
    scheme: Optional[Union[CostBandScheme, str]] = None,
) -> pl.DataFrame:
    """Every product with its cost band"""
    scheme = _scheme(scheme)
    return products.select(
        "product_key",
        "product_name",
        "cost",
        CostRange.expr(pl.col("cost"), scheme).alias("cost_range"),
    )


def cost_segment_counts(
    products: pl.DataFrame,
    scheme: Optional[Union[CostBandScheme, str]] = None,
) -> pl.DataFrame:
    """Number of products per cost band, descending by count"""
    segments = product_cost_segments(products, scheme)
    return aggregate(
        segments,
        by="cost_range",
        measures=[Measure("product_key", Reducer.COUNT, "total_products")],
    )
