"""
Warehouse Access Module
"""
from .loader import SalesWarehouse
from .schema import CUSTOMERS_SCHEMA, PRODUCTS_SCHEMA, SALES_SCHEMA, TableSchema

__all__ = [
    "SalesWarehouse",
    "TableSchema",
    "SALES_SCHEMA",
    "CUSTOMERS_SCHEMA",
    "PRODUCTS_SCHEMA",
]
