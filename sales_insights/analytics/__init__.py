"""
Sales Analytics Module
"""
from .aggregation import Measure, Reducer, aggregate, join_dimension
from .exploration import (
    category_hierarchy,
    customer_age_extremes,
    distinct_countries,
    order_date_range,
)
from .kpis import (
    avg_cost_by_category,
    bottom_products,
    category_contribution,
    customers_by_country,
    customers_by_gender,
    key_metrics,
    products_by_category,
    revenue_by_category,
    revenue_by_customer,
    sold_items_by_country,
    top_products,
)
from .segmentation import (
    CostBandScheme,
    CostRange,
    CustomerSegment,
    SegmentRules,
    cost_segment_counts,
    customer_segment_counts,
    customer_spending,
    product_cost_segments,
)
from .trends import Granularity, cumulative_trend, period_trend, yearly_trend
from .yoy import AverageChange, YearChange, product_yoy

__all__ = [
    "Measure",
    "Reducer",
    "aggregate",
    "join_dimension",
    "distinct_countries",
    "category_hierarchy",
    "order_date_range",
    "customer_age_extremes",
    "key_metrics",
    "customers_by_country",
    "customers_by_gender",
    "products_by_category",
    "avg_cost_by_category",
    "revenue_by_category",
    "revenue_by_customer",
    "sold_items_by_country",
    "top_products",
    "bottom_products",
    "category_contribution",
    "Granularity",
    "period_trend",
    "yearly_trend",
    "cumulative_trend",
    "AverageChange",
    "YearChange",
    "product_yoy",
    "CustomerSegment",
    "SegmentRules",
    "CostBandScheme",
    "CostRange",
    "customer_spending",
    "customer_segment_counts",
    "product_cost_segments",
    "cost_segment_counts",
]
