"""Conversions between ``products`` rows and Product entities."""
from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from dbaccess.models.product import Product

# Raised by map_row for a stored row that is not a valid Product
# (pydantic's ValidationError is a ValueError, decimal.InvalidOperation an ArithmeticError).
MAPPING_ERRORS = (KeyError, TypeError, ValueError, ArithmeticError)


def to_date(value: Any) -> date:
    """Return the date-only part of a driver or domain value."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    raise TypeError(f"Cannot convert {type(value).__name__} to date")


def to_datetime(value: Any) -> datetime:
    """Return a timestamp from a driver value (SQLite hands back ISO strings)."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    raise TypeError(f"Cannot convert {type(value).__name__} to datetime")


def to_decimal(value: Any) -> Decimal:
    """Return a Decimal without picking up binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, str)):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    raise TypeError(f"Cannot convert {type(value).__name__} to Decimal")


def to_insert_params(product: Product) -> dict[str, Any]:
    """Bind values for the insert statement, in column order."""
    return {
        "name": product.name,
        "producer": product.producer,
        "price": product.price,
        "expiration_date": to_date(product.expiration_date),
    }


def to_update_params(product: Product) -> dict[str, Any]:
    """Bind values for the update statement; ``id`` goes last for the WHERE clause."""
    params = to_insert_params(product)
    params["id"] = product.id
    return params


def map_row(row: Mapping[str, Any]) -> Product:
    """Build a fully populated Product from one ``products`` row.

    Args:
        row: Column name to value mapping (``Row._mapping`` or a plain dict)

    Returns:
        Product with every field set, including ``id`` and ``creation_time``
    """
    return Product(
        id=int(row["id"]),
        name=row["name"],
        producer=row["producer"],
        price=to_decimal(row["price"]),
        expiration_date=to_date(row["expiration_date"]),
        creation_time=to_datetime(row["creation_time"]),
    )
