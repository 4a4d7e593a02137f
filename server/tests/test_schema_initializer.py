"""Tests for SchemaInitializer and the packaged DDL scripts."""
from __future__ import annotations

from pathlib import Path
from typing import Generator
from unittest.mock import Mock

import pytest
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError

from dbaccess.core.db import create_db_engine
from dbaccess.core.exceptions import DaoOperationError, SchemaInitializationError
from dbaccess.services.schema_initializer import (
    DDL_FILE_NAME,
    PRODUCTS_DDL_FILE_NAME,
    SchemaInitializer,
    read_ddl_resource,
    table_exists,
)

INSERT_ACCOUNT_SQL = text(
    "INSERT INTO account (email, first_name, last_name, gender, birthday) "
    "VALUES (:email, :first_name, :last_name, :gender, :birthday)"
)


def account_params(email: str) -> dict[str, str]:
    return {
        "email": email,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "gender": "FEMALE",
        "birthday": "1815-12-10",
    }


@pytest.fixture
def fresh_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """Engine over an empty SQLite database."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'schema.db'}", echo=False)
    yield engine
    engine.dispose()


class TestReadDdlResource:
    """Packaged script lookup."""

    @pytest.mark.parametrize("dialect", ["sqlite", "postgresql"])
    def test_account_script_defines_named_constraints(self, dialect: str) -> None:
        ddl = read_ddl_resource(DDL_FILE_NAME, dialect)

        assert ddl.lstrip().startswith("CREATE TABLE account")
        assert "CONSTRAINT account_pk PRIMARY KEY (id)" in ddl
        assert "CONSTRAINT account_email_uq UNIQUE (email)" in ddl
        assert "DECIMAL(19, 4)" in ddl

    @pytest.mark.parametrize("dialect", ["sqlite", "postgresql"])
    def test_products_script_exists(self, dialect: str) -> None:
        assert "CREATE TABLE products" in read_ddl_resource(PRODUCTS_DDL_FILE_NAME, dialect)

    def test_unknown_dialect(self) -> None:
        with pytest.raises(SchemaInitializationError, match="for dialect oracle"):
            read_ddl_resource(DDL_FILE_NAME, "oracle")

    def test_unknown_file(self) -> None:
        with pytest.raises(SchemaInitializationError, match="missing.ddl"):
            read_ddl_resource("missing.ddl", "sqlite")


class TestSchemaInitializer:
    """Running the scripts."""

    def test_init_creates_account_table(self, fresh_engine: Engine) -> None:
        SchemaInitializer(fresh_engine).init()

        assert table_exists(fresh_engine, "account")
        columns = {c["name"]: c for c in inspect(fresh_engine).get_columns("account")}
        assert set(columns) == {
            "id",
            "email",
            "first_name",
            "last_name",
            "gender",
            "birthday",
            "balance",
            "creation_time",
        }
        assert columns["balance"]["nullable"] is True
        assert columns["email"]["nullable"] is False
        assert columns["birthday"]["nullable"] is False

    def test_account_primary_key(self, fresh_engine: Engine) -> None:
        SchemaInitializer(fresh_engine).init()

        pk = inspect(fresh_engine).get_pk_constraint("account")
        assert pk["constrained_columns"] == ["id"]

    def test_init_creates_products_table(self, fresh_engine: Engine) -> None:
        initializer = SchemaInitializer(fresh_engine, PRODUCTS_DDL_FILE_NAME)
        initializer.init()

        assert initializer.ddl_file_name == PRODUCTS_DDL_FILE_NAME
        assert table_exists(fresh_engine, "products")
        assert not table_exists(fresh_engine, "account")

    def test_init_twice_fails_with_storage_error(self, fresh_engine: Engine) -> None:
        initializer = SchemaInitializer(fresh_engine)
        initializer.init()

        with pytest.raises(SchemaInitializationError) as exc_info:
            initializer.init()

        assert isinstance(exc_info.value, DaoOperationError)
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_connection_failure_is_reported(self) -> None:
        engine = Mock()
        engine.dialect.name = "sqlite"
        engine.begin.side_effect = OperationalError("CREATE TABLE", {}, Exception("unable to open database"))

        with pytest.raises(SchemaInitializationError, match="Failed to execute init_db.ddl"):
            SchemaInitializer(engine).init()

    def test_creation_time_defaults_to_now(self, fresh_engine: Engine) -> None:
        SchemaInitializer(fresh_engine).init()

        with fresh_engine.begin() as conn:
            conn.execute(INSERT_ACCOUNT_SQL, account_params("ada@example.com"))
            row = conn.execute(text("SELECT id, creation_time FROM account")).one()

        assert row.id is not None
        assert row.creation_time is not None


class TestAccountConstraints:
    """Constraints declared by the account script."""

    def test_duplicate_email_rejected_without_corrupting_table(self, db_engine: Engine, clean_tables: Engine) -> None:
        with db_engine.begin() as conn:
            conn.execute(INSERT_ACCOUNT_SQL, account_params("grace@example.com"))

        with pytest.raises(IntegrityError):
            with db_engine.begin() as conn:
                conn.execute(INSERT_ACCOUNT_SQL, account_params("grace@example.com"))

        with db_engine.connect() as conn:
            emails = conn.execute(text("SELECT email FROM account")).scalars().all()
        assert emails == ["grace@example.com"]

    def test_mandatory_columns_enforced(self, db_engine: Engine, clean_tables: Engine) -> None:
        params = account_params("linus@example.com")
        params["gender"] = None

        with pytest.raises(IntegrityError):
            with db_engine.begin() as conn:
                conn.execute(INSERT_ACCOUNT_SQL, params)
