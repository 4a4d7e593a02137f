"""Domain models exposed for external modules."""
from .product import Product

__all__ = [
    "Product",
]
