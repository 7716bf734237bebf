"""
Data Quality Module
"""
from .validators import (
    DataValidator,
    ValidationResult,
    ValidationSeverity,
    ValidationStatus,
    create_customers_validator,
    create_products_validator,
    create_sales_validator,
    validate_warehouse,
)

__all__ = [
    "DataValidator",
    "ValidationResult",
    "ValidationSeverity",
    "ValidationStatus",
    "create_sales_validator",
    "create_customers_validator",
    "create_products_validator",
    "validate_warehouse",
]
