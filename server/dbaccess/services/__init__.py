"""Data-access services: schema setup, row mapping, and the product DAO."""
from __future__ import annotations

from .product_dao import ProductDao
from .product_stream import ProductStream
from .schema_initializer import DDL_FILE_NAME, PRODUCTS_DDL_FILE_NAME, SchemaInitializer, table_exists

__all__ = [
    "ProductDao",
    "ProductStream",
    "SchemaInitializer",
    "table_exists",
    "DDL_FILE_NAME",
    "PRODUCTS_DDL_FILE_NAME",
]
