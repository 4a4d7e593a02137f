"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import os
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Generator

import pytest
from sqlalchemy import text
from sqlalchemy.engine import Engine

from dbaccess.core.db import create_db_engine
from dbaccess.models.product import Product
from dbaccess.services.product_dao import ProductDao
from dbaccess.services.schema_initializer import DDL_FILE_NAME, PRODUCTS_DDL_FILE_NAME, SchemaInitializer

if TYPE_CHECKING:
    from _pytest.tmpdir import TempPathFactory

# Falls back to a throwaway SQLite file; point at PostgreSQL to match production
TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

TABLES = ("products", "account")


def _drop_tables(engine: Engine) -> None:
    with engine.begin() as conn:
        for table in TABLES:
            conn.execute(text(f"DROP TABLE IF EXISTS {table}"))


@pytest.fixture(scope="session")
def db_engine(tmp_path_factory: TempPathFactory) -> Generator[Engine, None, None]:
    """Create an engine with the account and products tables in place."""
    url = TEST_DATABASE_URL or f"sqlite:///{tmp_path_factory.mktemp('db') / 'test.db'}"
    engine = create_db_engine(url, echo=False)

    # Drop and recreate tables to ensure clean state
    _drop_tables(engine)
    SchemaInitializer(engine, DDL_FILE_NAME).init()
    SchemaInitializer(engine, PRODUCTS_DDL_FILE_NAME).init()

    yield engine

    _drop_tables(engine)
    engine.dispose()


@pytest.fixture
def clean_tables(db_engine: Engine) -> Generator[Engine, None, None]:
    """Empty every table after the test so rows never leak between tests."""
    yield db_engine
    with db_engine.begin() as conn:
        for table in TABLES:
            conn.execute(text(f"DELETE FROM {table}"))


@pytest.fixture
def product_dao(clean_tables: Engine) -> ProductDao:
    """DAO bound to the test engine with empty tables."""
    return ProductDao(clean_tables)


def make_product(name: str = "Milk", **overrides) -> Product:
    """Build a transient product with sensible defaults."""
    fields = {
        "name": name,
        "producer": "Farm Fresh",
        "price": Decimal("19.99"),
        "expiration_date": date(2030, 1, 15),
    }
    fields.update(overrides)
    return Product(**fields)


@pytest.fixture
def product_factory():
    """Expose ``make_product`` to tests."""
    return make_product
