"""
Test Suite Configuration
"""
from datetime import date

import pytest
import polars as pl

from sales_insights.config import get_settings
from sales_insights.warehouse import SalesWarehouse


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Isolate every test from the caller's environment and cached settings"""
    monkeypatch.setenv("APP_ENV", "testing")
    for name in [
        "SALES_REPORT_TOP_N",
        "SALES_REPORT_COST_BAND_SCHEME",
        "SALES_REPORT_TREND_GRANULARITY",
        "SALES_REPORT_VIP_SPENDING_THRESHOLD",
        "SALES_REPORT_MIN_LIFESPAN_MONTHS",
        "SALES_WAREHOUSE_DATA_DIR",
        "SALES_WAREHOUSE_DATABASE_URL",
        "SALES_WAREHOUSE_FILE_FORMAT",
        "SALES_WAREHOUSE_VALIDATE_ON_LOAD",
        "SALES_REPORT_OUTPUT_DIR",
        "SALES_REPORT_EXPORT_FORMAT",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ]:
        monkeypatch.delenv(name, raising=False)

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_sales_df() -> pl.DataFrame:
    """
    Sales facts covering 2023-2024.

    SO6 has no order date; SO7 references a customer and a product that are
    missing from the dimensions.
    """
    return pl.DataFrame({
        "order_number": ["SO1", "SO2", "SO3", "SO4", "SO5", "SO6", "SO7"],
        "order_date": [
            date(2023, 1, 5),
            date(2023, 3, 10),
            date(2024, 2, 1),
            date(2024, 6, 15),
            date(2024, 7, 1),
            None,
            date(2024, 8, 1),
        ],
        "customer_key": [1, 2, 1, 2, 3, 3, 99],
        "product_key": [10, 11, 10, 11, 13, 12, 77],
        "quantity": [1, 2, 1, 1, 2, 1, 1],
        "price": [3000.0, 35.0, 3000.0, 35.0, 250.0, 100.0, 50.0],
        "sales_amount": [3000.0, 70.0, 3000.0, 35.0, 500.0, 100.0, 50.0],
    })


@pytest.fixture
def sample_customers_df() -> pl.DataFrame:
    """Customer dimension; customer 4 never ordered"""
    return pl.DataFrame({
        "customer_key": [1, 2, 3, 4],
        "first_name": ["Jon", "Elizabeth", "Ruben", "Ana"],
        "last_name": ["Yang", "Johnson", "Torres", "Diaz"],
        "birthdate": [date(1970, 5, 1), date(1985, 7, 12), date(1999, 12, 31), None],
        "gender": ["Male", "Female", "Male", "Female"],
        "country": ["Germany", "United States", "United States", None],
    })


@pytest.fixture
def sample_products_df() -> pl.DataFrame:
    """Product dimension; Jersey costs exactly 100"""
    return pl.DataFrame({
        "product_key": [10, 11, 12, 13],
        "product_name": ["Road Bike", "Helmet", "Jersey", "Gloves"],
        "category": ["Bikes", "Accessories", "Clothing", "Clothing"],
        "subcategory": ["Road Bikes", "Helmets", "Jerseys", "Gloves"],
        "cost": [1200.0, 35.0, 100.0, 250.0],
    })


@pytest.fixture
def warehouse(sample_sales_df, sample_customers_df, sample_products_df) -> SalesWarehouse:
    """Conformed in-memory warehouse"""
    return SalesWarehouse.from_frames(sample_sales_df, sample_customers_df, sample_products_df)
