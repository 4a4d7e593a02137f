"""Product DAO and schema initializer over a pooled SQLAlchemy engine."""
from .core import DaoOperationError, ProductNotFoundError, SchemaInitializationError
from .models import Product
from .services import ProductDao, ProductStream, SchemaInitializer

__version__ = "0.1.0"

__all__ = [
    "DaoOperationError",
    "ProductNotFoundError",
    "SchemaInitializationError",
    "Product",
    "ProductDao",
    "ProductStream",
    "SchemaInitializer",
]
