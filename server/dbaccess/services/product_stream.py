"""Lazy, forward-only iteration over a products result cursor."""
from __future__ import annotations

import logging
import weakref
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from sqlalchemy.engine import Connection, CursorResult
from sqlalchemy.exc import SQLAlchemyError

from dbaccess.core.exceptions import DaoOperationError
from dbaccess.models.product import Product

from .row_mapper import MAPPING_ERRORS, map_row

logger = logging.getLogger(__name__)


def _release(result: CursorResult, connection: Connection) -> None:
    try:
        result.close()
    finally:
        connection.close()


class ProductStream(Iterator[Product]):
    """Pulls and maps one row per ``next()`` call.

    The stream owns the connection and cursor it was given. Both are released
    once the cursor is exhausted, on a read failure, on ``close()``, when a
    ``with`` block exits, or when the stream is garbage collected unclosed.
    """

    def __init__(
        self,
        connection: Connection,
        result: CursorResult,
        mapper: Callable[[Mapping[str, Any]], Product] = map_row,
    ) -> None:
        self._result = result
        self._mapper = mapper
        self._finalizer = weakref.finalize(self, _release, result, connection)

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def __iter__(self) -> ProductStream:
        return self

    def __next__(self) -> Product:
        if self.closed:
            raise StopIteration
        try:
            row = self._result.fetchone()
        except SQLAlchemyError as e:
            self.close()
            raise DaoOperationError("Error getting all products") from e
        if row is None:
            self.close()
            raise StopIteration
        try:
            return self._mapper(row._mapping)
        except MAPPING_ERRORS as e:
            self.close()
            raise DaoOperationError("Error getting all products") from e

    def close(self) -> None:
        """Release the cursor and return the connection to the pool."""
        if self._finalizer.alive:
            logger.debug("Releasing product stream connection")
            self._finalizer()

    def __enter__(self) -> ProductStream:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
