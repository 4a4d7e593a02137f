"""Errors raised at the data-access boundary."""
from __future__ import annotations


class DaoOperationError(Exception):
    """A DAO operation failed.

    Wraps either a storage failure (chained as ``__cause__``) or a business
    rule violation detected before or after talking to the database.
    """


class ProductNotFoundError(DaoOperationError):
    """No product row exists for the requested id."""

    def __init__(self, product_id: int | None) -> None:
        self.product_id = product_id
        super().__init__(f"Product with id = {product_id} does not exist")


class SchemaInitializationError(DaoOperationError):
    """A DDL resource could not be loaded or executed."""
