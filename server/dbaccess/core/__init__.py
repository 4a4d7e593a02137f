"""Core data-access utilities and infrastructure."""
from .config import Settings, get_settings
from .db import create_db_engine, dispose_engine, get_engine
from .exceptions import DaoOperationError, ProductNotFoundError, SchemaInitializationError

__all__ = [
    "Settings",
    "get_settings",
    "create_db_engine",
    "get_engine",
    "dispose_engine",
    "DaoOperationError",
    "ProductNotFoundError",
    "SchemaInitializationError",
]
