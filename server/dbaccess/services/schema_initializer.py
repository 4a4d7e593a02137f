"""Create tables from DDL scripts shipped with the package."""
from __future__ import annotations

import logging
from importlib import resources

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from dbaccess.core.exceptions import SchemaInitializationError

logger = logging.getLogger(__name__)

DDL_FILE_NAME = "init_db.ddl"
PRODUCTS_DDL_FILE_NAME = "products.ddl"

# Table each packaged script creates, used to detect already-initialized schemas.
DDL_TABLES = {
    DDL_FILE_NAME: "account",
    PRODUCTS_DDL_FILE_NAME: "products",
}


def read_ddl_resource(file_name: str, dialect: str) -> str:
    """Load a packaged DDL script written for the given SQL dialect.

    Args:
        file_name: Resource name, e.g. ``init_db.ddl``
        dialect: SQLAlchemy dialect name (``sqlite``, ``postgresql``)

    Returns:
        The script text

    Raises:
        SchemaInitializationError: If no such script is packaged
    """
    resource = resources.files("dbaccess") / "sql" / dialect / file_name
    try:
        return resource.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SchemaInitializationError(f"No DDL resource {file_name} for dialect {dialect}") from e


def table_exists(engine: Engine, table_name: str) -> bool:
    """Return True if the database already has the table."""
    return inspect(engine).has_table(table_name)


class SchemaInitializer:
    """Runs one CREATE TABLE script against the database.

    The default script creates the ``account`` table: a generated ``id``
    primary key (constraint ``account_pk``), a mandatory ``email`` with unique
    constraint ``account_email_uq``, mandatory ``first_name``, ``last_name``
    and ``gender`` strings of up to 255 characters, a mandatory ``birthday``
    date, an optional ``balance`` DECIMAL(19, 4), and a mandatory
    ``creation_time`` timestamp defaulting to the current time.
    """

    def __init__(self, engine: Engine, ddl_file_name: str = DDL_FILE_NAME) -> None:
        self._engine = engine
        self._ddl_file_name = ddl_file_name

    @property
    def ddl_file_name(self) -> str:
        return self._ddl_file_name

    def init(self) -> None:
        """Create the table described by the DDL script.

        Raises:
            SchemaInitializationError: If the script is missing or fails to run
                (table already exists, malformed DDL, connection failure)
        """
        sql = self._fetch_create_table_sql()
        self._create_table_from_sql(sql)
        logger.info(f"Executed {self._ddl_file_name} against {self._engine.url.render_as_string()}")

    def _fetch_create_table_sql(self) -> str:
        return read_ddl_resource(self._ddl_file_name, self._engine.dialect.name)

    def _create_table_from_sql(self, sql: str) -> None:
        try:
            with self._engine.begin() as conn:
                conn.exec_driver_sql(sql)
        except SQLAlchemyError as e:
            raise SchemaInitializationError(f"Failed to execute {self._ddl_file_name}: {e}") from e
