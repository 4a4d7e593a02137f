"""Product domain entity."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field


NonEmptyStr = Annotated[str, Field(min_length=1, max_length=255)]


class Product(BaseModel):
    """A product row of the ``products`` table.

    ``id`` and ``creation_time`` stay ``None`` until the product is saved;
    the store fills both in from the database.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: int | None = Field(default=None, description="Database generated identifier")
    name: NonEmptyStr = Field(description="Display name of the product")
    producer: NonEmptyStr = Field(description="Manufacturer of the product")
    price: Decimal = Field(description="Unit price")
    expiration_date: date = Field(description="Last day the product may be sold")
    creation_time: datetime | None = Field(default=None, description="Set by the database on insert")

    def __eq__(self, other: Any) -> bool:
        # Transient products only equal themselves; persisted ones compare by id.
        if not isinstance(other, Product):
            return NotImplemented
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    __hash__ = None  # type: ignore[assignment]
