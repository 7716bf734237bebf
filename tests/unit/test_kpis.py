"""
Unit Tests - KPIs, Magnitude, Ranking and Category Contribution
"""
import pytest
import polars as pl

from sales_insights.analytics.kpis import (
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
from sales_insights.exceptions import ZeroTotalError
from sales_insights.warehouse import SalesWarehouse


class TestKeyMetrics:
    """Tests for key_metrics"""

    def test_measures(self, warehouse):
        result = key_metrics(warehouse)
        metrics = dict(zip(result["measure_name"].to_list(), result["measure_value"].to_list()))

        assert metrics["Total Sales"] == pytest.approx(6755.0)
        assert metrics["Total Quantity"] == 9
        assert metrics["Average Price"] == pytest.approx(6470.0 / 7)
        assert metrics["Total Nr. Orders"] == 7
        assert metrics["Total Nr. Products"] == 4
        assert metrics["Total Nr. Customers"] == 4
        assert metrics["Total Nr. Customers With Orders"] == 4

    def test_empty_warehouse(self, sample_sales_df):
        empty = SalesWarehouse.from_frames(sample_sales_df.clear(), validate=False)

        result = key_metrics(empty)
        metrics = dict(zip(result["measure_name"].to_list(), result["measure_value"].to_list()))

        assert metrics["Total Sales"] == 0
        assert metrics["Average Price"] is None
        assert metrics["Total Nr. Customers"] == 0


class TestMagnitude:
    """Tests for the magnitude breakdowns"""

    def test_customers_by_country(self, warehouse):
        result = customers_by_country(warehouse)

        assert result.to_dicts() == [
            {"country": "United States", "total_customers": 2},
            {"country": "Germany", "total_customers": 1},
            {"country": None, "total_customers": 1},
        ]

    def test_customers_by_gender(self, warehouse):
        result = customers_by_gender(warehouse)

        assert result["total_customers"].to_list() == [2, 2]

    def test_products_by_category(self, warehouse):
        result = products_by_category(warehouse)

        assert result.row(0, named=True) == {"category": "Clothing", "total_products": 2}

    def test_avg_cost_by_category(self, warehouse):
        result = avg_cost_by_category(warehouse)

        assert result["category"].to_list() == ["Bikes", "Clothing", "Accessories"]
        assert result["avg_cost"].to_list() == pytest.approx([1200.0, 175.0, 35.0])

    def test_revenue_by_category_includes_unknown(self, warehouse):
        """Sales of unknown products are reported under a null category"""
        result = revenue_by_category(warehouse)
        revenue = dict(zip(result["category"].to_list(), result["total_revenue"].to_list()))

        assert revenue == {"Bikes": 6000.0, "Clothing": 600.0, "Accessories": 105.0, None: 50.0}
        assert result["total_revenue"].sum() == pytest.approx(warehouse.sales["sales_amount"].sum())

    def test_revenue_by_customer(self, warehouse):
        result = revenue_by_customer(warehouse)

        first = result.row(0, named=True)
        assert first == {"customer_key": 1, "first_name": "Jon", "last_name": "Yang", "total_revenue": 6000.0}

        unknown = result.filter(pl.col("customer_key") == 99).row(0, named=True)
        assert unknown["first_name"] is None

    def test_sold_items_by_country(self, warehouse):
        result = sold_items_by_country(warehouse)
        items = dict(zip(result["country"].to_list(), result["total_sold_items"].to_list()))

        assert items == {"United States": 6, "Germany": 2, None: 1}


class TestRanking:
    """Tests for top_products and bottom_products"""

    def test_top_products(self, warehouse):
        result = top_products(warehouse, n=2)

        assert result.columns == ["product_name", "total_revenue", "rank_products"]
        assert result["product_name"].to_list() == ["Road Bike", "Gloves"]
        assert result["rank_products"].to_list() == [1, 2]

    def test_top_products_default_from_settings(self, warehouse, monkeypatch):
        from sales_insights.config import get_settings

        monkeypatch.setenv("SALES_REPORT_TOP_N", "3")
        get_settings.cache_clear()

        assert len(top_products(warehouse)) == 3

    def test_bottom_products(self, warehouse):
        result = bottom_products(warehouse, n=2)

        assert result["total_revenue"].to_list() == pytest.approx([50.0, 100.0])
        assert result["product_name"].to_list() == [None, "Jersey"]


class TestCategoryContribution:
    """Tests for category_contribution"""

    def test_percentages(self, warehouse):
        result = category_contribution(warehouse)

        assert result.columns == ["category", "total_sales", "overall_sales", "percentage_of_total"]
        assert result["category"].to_list() == ["Bikes", "Clothing", "Accessories", None]
        assert result["overall_sales"].to_list() == pytest.approx([6755.0] * 4)
        assert result["percentage_of_total"].to_list() == pytest.approx([88.82, 8.88, 1.55, 0.74])

    def test_zero_total_reports_zero_percent(self, sample_sales_df, sample_products_df):
        zero = sample_sales_df.with_columns(pl.lit(0.0).alias("sales_amount"))
        warehouse = SalesWarehouse.from_frames(zero, products=sample_products_df, validate=False)

        result = category_contribution(warehouse)

        assert result["percentage_of_total"].to_list() == [0.0] * len(result)
        assert result["overall_sales"].to_list() == [0.0] * len(result)

    def test_zero_total_strict_raises(self, sample_sales_df, sample_products_df):
        zero = sample_sales_df.with_columns(pl.lit(0.0).alias("sales_amount"))
        warehouse = SalesWarehouse.from_frames(zero, products=sample_products_df, validate=False)

        with pytest.raises(ZeroTotalError):
            category_contribution(warehouse, strict=True)

    def test_zero_total_error_is_zero_division(self):
        assert issubclass(ZeroTotalError, ZeroDivisionError)

    def test_empty_sales(self, sample_sales_df, sample_products_df):
        warehouse = SalesWarehouse.from_frames(sample_sales_df.clear(), products=sample_products_df, validate=False)

        result = category_contribution(warehouse, strict=True)

        assert result.is_empty()
        assert "percentage_of_total" in result.columns
