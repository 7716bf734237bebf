"""
Business KPIs, magnitude breakdowns, product rankings and category
contribution, all built on the Aggregation Engine.
"""

from typing import Optional

import polars as pl
import structlog

from sales_insights.config import get_settings
from sales_insights.exceptions import ZeroTotalError
from sales_insights.warehouse import SalesWarehouse
from .aggregation import Measure, Reducer, aggregate, join_dimension

logger = structlog.get_logger(__name__)


# =============================================================================
# KEY METRICS
# =============================================================================

def key_metrics(warehouse: SalesWarehouse) -> pl.DataFrame:
    """
    All headline measures of the business in a single report.

    Returns:
        Rows of (measure_name, measure_value)
    """
    sales = warehouse.sales.select(
        pl.col("sales_amount").sum().alias("Total Sales"),
        pl.col("quantity").sum().alias("Total Quantity"),
        pl.col("price").mean().alias("Average Price"),
        pl.col("order_number").drop_nulls().n_unique().alias("Total Nr. Orders"),
        pl.col("customer_key").drop_nulls().n_unique().alias("Total Nr. Customers With Orders"),
    ).row(0, named=True)
    products = warehouse.products.select(
        pl.col("product_name").count().alias("Total Nr. Products"),
    ).row(0, named=True)
    customers = warehouse.customers.select(
        pl.col("customer_key").count().alias("Total Nr. Customers"),
    ).row(0, named=True)

    metrics = {
        "Total Sales": sales["Total Sales"],
        "Total Quantity": sales["Total Quantity"],
        "Average Price": sales["Average Price"],
        "Total Nr. Orders": sales["Total Nr. Orders"],
        "Total Nr. Products": products["Total Nr. Products"],
        "Total Nr. Customers": customers["Total Nr. Customers"],
        "Total Nr. Customers With Orders": sales["Total Nr. Customers With Orders"],
    }

    return pl.DataFrame(
        {
            "measure_name": list(metrics.keys()),
            "measure_value": [float(v) if v is not None else None for v in metrics.values()],
        },
        schema={"measure_name": pl.Utf8, "measure_value": pl.Float64},
    )


# =============================================================================
# MAGNITUDE ANALYSIS
# =============================================================================

def customers_by_country(warehouse: SalesWarehouse) -> pl.DataFrame:
    return aggregate(
        warehouse.customers, "country", [Measure("customer_key", Reducer.COUNT, "total_customers")]
    )


def customers_by_gender(warehouse: SalesWarehouse) -> pl.DataFrame:
    return aggregate(
        warehouse.customers, "gender", [Measure("customer_key", Reducer.COUNT, "total_customers")]
    )


def products_by_category(warehouse: SalesWarehouse) -> pl.DataFrame:
    return aggregate(
        warehouse.products, "category", [Measure("product_key", Reducer.COUNT, "total_products")]
    )


def avg_cost_by_category(warehouse: SalesWarehouse) -> pl.DataFrame:
    return aggregate(
        warehouse.products, "category", [Measure("cost", Reducer.AVG, "avg_cost")]
    )


def revenue_by_category(warehouse: SalesWarehouse) -> pl.DataFrame:
    """Revenue per product category; unmatched products form a null category"""
    facts = join_dimension(warehouse.sales, warehouse.products, on="product_key", columns=["category"])
    return aggregate(facts, "category", [Measure("sales_amount", Reducer.SUM, "total_revenue")])


def revenue_by_customer(warehouse: SalesWarehouse) -> pl.DataFrame:
    """
    Revenue per customer with the customer's name.

    Grouped on the fact's customer key, so customers missing from the
    dimension keep their key and carry null names.
    """
    facts = join_dimension(
        warehouse.sales, warehouse.customers, on="customer_key", columns=["first_name", "last_name"]
    )
    return aggregate(
        facts,
        ["customer_key", "first_name", "last_name"],
        [Measure("sales_amount", Reducer.SUM, "total_revenue")],
    )


def sold_items_by_country(warehouse: SalesWarehouse) -> pl.DataFrame:
    facts = join_dimension(warehouse.sales, warehouse.customers, on="customer_key", columns=["country"])
    return aggregate(facts, "country", [Measure("quantity", Reducer.SUM, "total_sold_items")])


# =============================================================================
# PRODUCT RANKING
# =============================================================================

def revenue_by_product(warehouse: SalesWarehouse, descending: bool = True) -> pl.DataFrame:
    facts = join_dimension(warehouse.sales, warehouse.products, on="product_key", columns=["product_name"])
    return aggregate(
        facts,
        "product_name",
        [Measure("sales_amount", Reducer.SUM, "total_revenue")],
        descending=descending,
    )


def top_products(warehouse: SalesWarehouse, n: Optional[int] = None) -> pl.DataFrame:
    """Best ``n`` products by revenue with their 1-based rank"""
    n = n or get_settings().report.top_n
    return (
        revenue_by_product(warehouse)
        .head(n)
        .with_row_index("rank_products", offset=1)
        .select("product_name", "total_revenue", "rank_products")
    )


def bottom_products(warehouse: SalesWarehouse, n: Optional[int] = None) -> pl.DataFrame:
    """Worst ``n`` products by revenue, lowest first"""
    n = n or get_settings().report.top_n
    return revenue_by_product(warehouse, descending=False).head(n)


# =============================================================================
# CATEGORY CONTRIBUTION
# =============================================================================

def category_contribution(warehouse: SalesWarehouse, strict: bool = False) -> pl.DataFrame:
    """
    Share of overall sales contributed by each category.

    When overall sales are zero every category reports 0.0 percent, unless
    ``strict`` is set, in which case ``ZeroTotalError`` is raised. No
    categories means an empty report in both modes.

    Returns:
        category, total_sales, overall_sales, percentage_of_total
        (rounded to two decimals), descending by total_sales
    """
    facts = join_dimension(warehouse.sales, warehouse.products, on="product_key", columns=["category"])
    by_category = aggregate(facts, "category", [Measure("sales_amount", Reducer.SUM, "total_sales")])

    overall = float(by_category["total_sales"].sum()) if not by_category.is_empty() else 0.0

    if by_category.is_empty():
        percentage = pl.lit(None, dtype=pl.Float64)
    elif overall == 0:
        if strict:
            raise ZeroTotalError("sales")
        logger.warning("Overall sales are zero, reporting 0% for every category", categories=len(by_category))
        percentage = pl.lit(0.0, dtype=pl.Float64)
    else:
        percentage = (pl.col("total_sales") / overall * 100).round(2)

    return by_category.with_columns(
        pl.lit(overall, dtype=pl.Float64).alias("overall_sales"),
        percentage.alias("percentage_of_total"),
    )
