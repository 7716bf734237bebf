"""
Unit Tests - Warehouse Loading
"""
from datetime import date, datetime

import pytest
import polars as pl
from sqlalchemy import create_engine, text

from sales_insights.exceptions import SchemaError, TableLoadError
from sales_insights.warehouse import (
    CUSTOMERS_SCHEMA,
    PRODUCTS_SCHEMA,
    SALES_SCHEMA,
    SalesWarehouse,
)


class TestTableSchema:
    """Tests for schema conformance"""

    def test_casts_to_declared_types(self):
        df = pl.DataFrame({
            "product_key": ["1", "2"],
            "product_name": ["A", "B"],
            "category": ["X", "Y"],
            "subcategory": ["x", "y"],
            "cost": [10, 20],
        })

        result = PRODUCTS_SCHEMA.conform(df)

        assert result.schema["product_key"] == pl.Int64
        assert result.schema["cost"] == pl.Float64

    def test_parses_dates(self):
        df = pl.DataFrame({
            "order_number": ["SO1", "SO2"],
            "order_date": ["2024-01-31", None],
            "customer_key": [1, 2],
            "product_key": [1, 2],
            "quantity": [1, 1],
            "price": [1.0, 1.0],
            "sales_amount": [1.0, 1.0],
        })

        result = SALES_SCHEMA.conform(df)

        assert result["order_date"].to_list() == [date(2024, 1, 31), None]

    def test_datetimes_become_dates(self):
        df = pl.DataFrame({
            "customer_key": [1],
            "birthdate": [datetime(1980, 2, 3, 10, 30)],
            "gender": ["Female"],
            "country": ["France"],
        })

        result = CUSTOMERS_SCHEMA.conform(df)

        assert result["birthdate"].to_list() == [date(1980, 2, 3)]

    def test_optional_columns_added_as_null(self):
        df = pl.DataFrame({
            "customer_key": [1],
            "birthdate": [date(1980, 2, 3)],
            "gender": ["Female"],
            "country": ["France"],
        })

        result = CUSTOMERS_SCHEMA.conform(df)

        assert result.columns == list(CUSTOMERS_SCHEMA.columns)
        assert result["first_name"].to_list() == [None]

    def test_missing_required_column(self, sample_sales_df):
        with pytest.raises(SchemaError) as exc_info:
            SALES_SCHEMA.conform(sample_sales_df.drop("sales_amount"))

        assert exc_info.value.missing_columns == ["sales_amount"]
        assert exc_info.value.table == "fact_sales"

    def test_uncastable_column(self, sample_sales_df):
        bad = sample_sales_df.with_columns(pl.lit("not a date").alias("order_date"))

        with pytest.raises(SchemaError):
            SALES_SCHEMA.conform(bad)

    def test_extra_columns_dropped(self, sample_products_df):
        df = sample_products_df.with_columns(pl.lit("red").alias("color"))

        assert "color" not in PRODUCTS_SCHEMA.conform(df).columns


class TestFromFrames:
    """Tests for SalesWarehouse.from_frames"""

    def test_row_counts(self, warehouse):
        assert warehouse.row_counts() == {"sales": 7, "customers": 4, "products": 4}

    def test_missing_dimensions_are_empty(self, sample_sales_df):
        warehouse = SalesWarehouse.from_frames(sample_sales_df, validate=False)

        assert warehouse.customers.is_empty()
        assert warehouse.products.columns == list(PRODUCTS_SCHEMA.columns)


class TestFromDirectory:
    """Tests for SalesWarehouse.from_directory"""

    def _write(self, tmp_path, sales, customers, products, fmt):
        for name, df in [("fact_sales", sales), ("dim_customers", customers), ("dim_products", products)]:
            path = tmp_path / f"{name}.{fmt}"
            if fmt == "csv":
                df.write_csv(path)
            else:
                df.write_parquet(path)

    @pytest.mark.parametrize("fmt", ["csv", "parquet"])
    def test_round_trip(self, tmp_path, sample_sales_df, sample_customers_df, sample_products_df, fmt):
        self._write(tmp_path, sample_sales_df, sample_customers_df, sample_products_df, fmt)

        warehouse = SalesWarehouse.from_directory(tmp_path, file_format=fmt)

        assert warehouse.row_counts() == {"sales": 7, "customers": 4, "products": 4}
        assert warehouse.sales.schema["order_date"] == pl.Date
        assert warehouse.sales["sales_amount"].sum() == pytest.approx(6755.0)

    def test_directory_from_settings(self, tmp_path, monkeypatch, sample_sales_df, sample_customers_df, sample_products_df):
        from sales_insights.config import get_settings

        self._write(tmp_path, sample_sales_df, sample_customers_df, sample_products_df, "csv")
        monkeypatch.setenv("SALES_WAREHOUSE_DATA_DIR", str(tmp_path))
        get_settings.cache_clear()

        warehouse = SalesWarehouse.from_directory(validate=False)

        assert len(warehouse.sales) == 7

    def test_missing_file(self, tmp_path):
        with pytest.raises(TableLoadError) as exc_info:
            SalesWarehouse.from_directory(tmp_path, file_format="csv")

        assert "fact_sales.csv" in exc_info.value.source


class TestFromDatabase:
    """Tests for SalesWarehouse.from_database"""

    @pytest.fixture
    def database_url(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'warehouse.db'}"
        engine = create_engine(url)
        with engine.begin() as conn:
            conn.execute(text(
                "CREATE TABLE fact_sales (order_number TEXT, order_date TEXT, customer_key INTEGER, "
                "product_key INTEGER, quantity INTEGER, price REAL, sales_amount REAL)"
            ))
            conn.execute(text(
                "CREATE TABLE dim_customers (customer_key INTEGER, first_name TEXT, last_name TEXT, "
                "birthdate TEXT, gender TEXT, country TEXT)"
            ))
            conn.execute(text(
                "CREATE TABLE dim_products (product_key INTEGER, product_name TEXT, category TEXT, "
                "subcategory TEXT, cost REAL)"
            ))
            conn.execute(text(
                "INSERT INTO fact_sales VALUES "
                "('SO1', '2023-01-05', 1, 10, 1, 3000.0, 3000.0), "
                "('SO2', '2024-03-10', 1, 10, 2, 35.0, 70.0)"
            ))
            conn.execute(text(
                "INSERT INTO dim_customers VALUES (1, 'Jon', 'Yang', '1970-05-01', 'Male', 'Germany')"
            ))
            conn.execute(text(
                "INSERT INTO dim_products VALUES (10, 'Road Bike', 'Bikes', 'Road Bikes', 1200.0)"
            ))
        engine.dispose()
        return url

    def test_reads_tables(self, database_url):
        warehouse = SalesWarehouse.from_database(database_url, db_schema="")

        assert warehouse.row_counts() == {"sales": 2, "customers": 1, "products": 1}
        assert warehouse.sales["order_date"].to_list() == [date(2023, 1, 5), date(2024, 3, 10)]
        assert warehouse.customers["birthdate"].to_list() == [date(1970, 5, 1)]

    def test_missing_table(self, database_url):
        with pytest.raises(TableLoadError):
            SalesWarehouse.from_database(database_url, db_schema="missing_schema")

    def test_requires_url(self):
        with pytest.raises(TableLoadError):
            SalesWarehouse.from_database()
