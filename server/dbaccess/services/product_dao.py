"""Product DAO issuing parameterized SQL against the ``products`` table."""
from __future__ import annotations

import logging

from sqlalchemy import Date, Numeric, String, bindparam, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeDecorator

from dbaccess.core.exceptions import DaoOperationError, ProductNotFoundError
from dbaccess.models.product import Product

from .product_stream import ProductStream
from .row_mapper import MAPPING_ERRORS, map_row, to_datetime, to_insert_params, to_update_params

logger = logging.getLogger(__name__)

SAVE_PRODUCT_SQL = (
    "INSERT INTO products (name, producer, price, expiration_date) "
    "VALUES (:name, :producer, :price, :expiration_date) "
    "RETURNING id, creation_time"
)
FIND_ALL_PRODUCTS_SQL = "SELECT * FROM products"
FIND_PRODUCT_BY_ID_SQL = "SELECT * FROM products WHERE id = :id"
UPDATE_PRODUCT_SQL = (
    "UPDATE products SET name = :name, producer = :producer, "
    "price = :price, expiration_date = :expiration_date WHERE id = :id"
)
REMOVE_PRODUCT_BY_ID_SQL = "DELETE FROM products WHERE id = :id"


class ExactDecimal(TypeDecorator):
    """DECIMAL where the server has one; exact decimal text on SQLite."""

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String())
        return dialect.type_descriptor(Numeric(19, 4))

    def process_bind_param(self, value, dialect):
        # SQLite would round a float bind to about 15 significant digits.
        if value is not None and dialect.name == "sqlite":
            return str(value)
        return value


def _product_statement(sql: str) -> TextClause:
    # Typed binds let dialects without native DECIMAL/DATE adapt the values.
    return text(sql).bindparams(
        bindparam("price", type_=ExactDecimal(19, 4)),
        bindparam("expiration_date", type_=Date()),
    )


_SAVE_PRODUCT = _product_statement(SAVE_PRODUCT_SQL)
_UPDATE_PRODUCT = _product_statement(UPDATE_PRODUCT_SQL)
_FIND_ALL_PRODUCTS = text(FIND_ALL_PRODUCTS_SQL)
_FIND_PRODUCT_BY_ID = text(FIND_PRODUCT_BY_ID_SQL)
_REMOVE_PRODUCT_BY_ID = text(REMOVE_PRODUCT_BY_ID_SQL)


class ProductDao:
    """CRUD access to products over a pooled engine.

    Every method holds a connection for the duration of the call only, and
    reports any failure as :class:`DaoOperationError`.
    """

    def __init__(self, engine: Engine) -> None:
        """Initialize the DAO with a SQLAlchemy engine.

        Args:
            engine: Connection provider; each call checks out its own connection
        """
        self._engine = engine

    def save(self, product: Product) -> None:
        """Insert a new product and write the generated fields back onto it.

        Args:
            product: Transient product; its ``id`` and ``creation_time`` are set on success

        Raises:
            DaoOperationError: If the insert fails or no generated key comes back
        """
        try:
            with self._engine.begin() as conn:
                row = conn.execute(_SAVE_PRODUCT, to_insert_params(product)).first()
        except SQLAlchemyError as e:
            raise DaoOperationError(f"Error saving product: {product!r}") from e

        if row is None:
            logger.warning(f"No generated key returned for product {product!r}")
            raise DaoOperationError(f"Error while fetching generated key for Product: {product!r}")

        product.id = int(row.id)
        product.creation_time = to_datetime(row.creation_time)
        logger.debug(f"Saved product with id = {product.id}")

    def find_all(self) -> list[Product]:
        """Fetch every product in result-set order.

        Returns:
            List of products, empty if the table has no rows

        Raises:
            DaoOperationError: If the query fails or a stored row cannot be mapped
        """
        with self.stream_all() as stream:
            return list(stream)

    def stream_all(self) -> ProductStream:
        """Open a lazy stream over every product.

        The returned stream owns a pooled connection until it is exhausted or
        closed; use it as a context manager when it may be abandoned early.
        """
        try:
            conn = self._engine.connect()
        except SQLAlchemyError as e:
            raise DaoOperationError("Error while streaming all products") from e
        try:
            result = conn.execution_options(stream_results=True).execute(_FIND_ALL_PRODUCTS)
        except SQLAlchemyError as e:
            conn.close()
            raise DaoOperationError("Error while streaming all products") from e
        return ProductStream(conn, result)

    def find_one(self, product_id: int) -> Product:
        """Fetch a product by id.

        Args:
            product_id: Database identifier

        Returns:
            The matching product

        Raises:
            ProductNotFoundError: If no row has this id
            DaoOperationError: If the query fails or the stored row cannot be mapped
        """
        try:
            with self._engine.connect() as conn:
                row = conn.execute(_FIND_PRODUCT_BY_ID, {"id": product_id}).first()
        except SQLAlchemyError as e:
            raise DaoOperationError(f"Error finding product with id = {product_id}") from e

        if row is None:
            raise ProductNotFoundError(product_id)
        try:
            return map_row(row._mapping)
        except MAPPING_ERRORS as e:
            raise DaoOperationError(f"Error mapping product with id = {product_id}") from e

    def update(self, product: Product) -> None:
        """Overwrite the mutable columns of an existing product.

        Raises:
            DaoOperationError: If the product or its id is missing (no I/O is done)
            ProductNotFoundError: If no row has the product's id
        """
        self._check_persisted(product)
        try:
            with self._engine.begin() as conn:
                updated = conn.execute(_UPDATE_PRODUCT, to_update_params(product)).rowcount
        except SQLAlchemyError as e:
            raise DaoOperationError(f"Error updating product {product!r}") from e

        if updated == 0:
            logger.warning(f"Update matched no product with id = {product.id}")
            raise ProductNotFoundError(product.id)
        logger.debug(f"Updated product with id = {product.id}")

    def remove(self, product: Product) -> None:
        """Delete the row backing a product.

        Raises:
            DaoOperationError: If the product or its id is missing (no I/O is done)
            ProductNotFoundError: If no row has the product's id
        """
        self._check_persisted(product)
        try:
            with self._engine.begin() as conn:
                removed = conn.execute(_REMOVE_PRODUCT_BY_ID, {"id": product.id}).rowcount
        except SQLAlchemyError as e:
            raise DaoOperationError(f"Error removing product {product!r}") from e

        if removed == 0:
            logger.warning(f"Remove matched no product with id = {product.id}")
            raise ProductNotFoundError(product.id)
        logger.debug(f"Removed product with id = {product.id}")

    @staticmethod
    def _check_persisted(product: Product | None) -> None:
        if product is None:
            raise DaoOperationError("Product is null")
        if product.id is None:
            raise DaoOperationError("Cannot find a product without ID")
