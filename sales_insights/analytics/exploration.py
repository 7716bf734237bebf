"""
Dimension and date exploration reports.
"""

from datetime import date
from typing import Optional

import polars as pl


def distinct_countries(customers: pl.DataFrame) -> pl.DataFrame:
    """Countries customers come from"""
    return customers.select("country").unique().sort("country", nulls_last=True)


def category_hierarchy(products: pl.DataFrame) -> pl.DataFrame:
    """Distinct category / subcategory / product combinations"""
    columns = ["category", "subcategory", "product_name"]
    return products.select(columns).unique().sort(columns)


def order_date_range(sales: pl.DataFrame) -> pl.DataFrame:
    """First and last order date and the number of calendar years between them"""
    return sales.select(
        pl.col("order_date").min().alias("first_date"),
        pl.col("order_date").max().alias("last_date"),
    ).with_columns(
        (pl.col("last_date").dt.year() - pl.col("first_date").dt.year()).alias("order_range_years")
    )


def customer_age_extremes(customers: pl.DataFrame, as_of: Optional[date] = None) -> pl.DataFrame:
    """
    Oldest and youngest customer birthdates with their ages in calendar
    years as of ``as_of`` (default: today).
    """
    as_of = as_of or date.today()
    return customers.select(
        pl.col("birthdate").min().alias("oldest_birthdate"),
        pl.col("birthdate").max().alias("youngest_birthdate"),
    ).with_columns(
        (pl.lit(as_of.year) - pl.col("oldest_birthdate").dt.year()).alias("oldest_age"),
        (pl.lit(as_of.year) - pl.col("youngest_birthdate").dt.year()).alias("youngest_age"),
    )
