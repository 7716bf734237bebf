"""
Sales Insights
Centralized Configuration Management

Configuration for the warehouse source, report rules and logging, loaded
from environment variables (and an optional ``.env`` file) with Pydantic
settings.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WarehouseSettings(BaseSettings):
    """Star-schema source configuration"""

    model_config = SettingsConfigDict(
        env_prefix="SALES_WAREHOUSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    data_dir: str = Field(default="./data/gold", description="Directory holding the table files")
    file_format: str = Field(default="csv", description="Table file format: csv or parquet")
    database_url: Optional[str] = Field(default=None, description="SQLAlchemy URL of the warehouse database")
    db_schema: str = Field(default="gold", description="Database schema holding the tables")

    # Table names
    sales_table: str = Field(default="fact_sales", description="Sales fact table")
    customers_table: str = Field(default="dim_customers", description="Customer dimension table")
    products_table: str = Field(default="dim_products", description="Product dimension table")

    validate_on_load: bool = Field(default=True, description="Run data quality checks after loading")

    @field_validator("file_format")
    @classmethod
    def validate_file_format(cls, v: str) -> str:
        """Validate table file format"""
        allowed = ["csv", "parquet"]
        if v.lower() not in allowed:
            raise ValueError(f"File format must be one of: {allowed}")
        return v.lower()


class ReportSettings(BaseSettings):
    """Report rules and output configuration"""

    model_config = SettingsConfigDict(
        env_prefix="SALES_REPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Customer segmentation
    vip_spending_threshold: float = Field(default=5000.0, description="Spending above which a customer is VIP")
    min_lifespan_months: int = Field(default=12, description="Lifespan needed for VIP/Regular")

    # Product segmentation
    cost_band_scheme: str = Field(default="source", description="Cost bands: source or contiguous")

    # Ranking and trends
    top_n: int = Field(default=5, ge=1, description="Products listed by the ranking reports")
    trend_granularity: str = Field(default="year", description="Trend period: year, quarter or month")

    # Output
    output_dir: str = Field(default="./reports", description="Directory for exported reports")
    export_format: str = Field(default="csv", description="Export format: csv or parquet")

    @field_validator("cost_band_scheme")
    @classmethod
    def validate_cost_band_scheme(cls, v: str) -> str:
        allowed = ["source", "contiguous"]
        if v.lower() not in allowed:
            raise ValueError(f"Cost band scheme must be one of: {allowed}")
        return v.lower()

    @field_validator("trend_granularity")
    @classmethod
    def validate_trend_granularity(cls, v: str) -> str:
        allowed = ["year", "quarter", "month"]
        if v.lower() not in allowed:
            raise ValueError(f"Trend granularity must be one of: {allowed}")
        return v.lower()

    @field_validator("export_format")
    @classmethod
    def validate_export_format(cls, v: str) -> str:
        allowed = ["csv", "parquet"]
        if v.lower() not in allowed:
            raise ValueError(f"Export format must be one of: {allowed}")
        return v.lower()


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="text", alias="LOG_FORMAT", description="Log format: json or text")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="sales-insights", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")

    # Subsystem configurations
    warehouse: WarehouseSettings = Field(default_factory=WarehouseSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
