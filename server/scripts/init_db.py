#!/usr/bin/env python3
"""Create the account and products tables from the packaged DDL scripts.

Waits for the database to accept connections, then runs each requested
script once through the schema initializer.
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

# Add parent directory to path so we can import dbaccess without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from dbaccess.core.config import get_settings
from dbaccess.core.db import create_db_engine
from dbaccess.core.exceptions import SchemaInitializationError
from dbaccess.services.schema_initializer import (
    DDL_FILE_NAME,
    DDL_TABLES,
    PRODUCTS_DDL_FILE_NAME,
    SchemaInitializer,
    table_exists,
)

logger = logging.getLogger(__name__)


def wait_for_db(engine: Engine, max_retries: int = 30, retry_interval: int = 2) -> bool:
    """Wait for database to become available.

    Args:
        engine: Engine pointing at the target database
        max_retries: Maximum number of connection attempts
        retry_interval: Seconds to wait between retries

    Returns:
        True if database is available, False otherwise
    """
    logger.info("Waiting for database to become available...")

    for attempt in range(1, max_retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database connection established")
            return True
        except OperationalError as e:
            if attempt == max_retries:
                logger.error(f"Failed to connect to database after {max_retries} attempts: {e}")
                return False

            logger.warning(f"Attempt {attempt}/{max_retries} failed, retrying in {retry_interval}s...")
            time.sleep(retry_interval)

    return False


def init_schema(engine: Engine, ddl_files: list[str], skip_existing: bool = False) -> bool:
    """Run each DDL script, optionally skipping tables that already exist.

    Returns:
        True if every script ran (or was skipped), False on the first failure
    """
    for ddl_file in ddl_files:
        table = DDL_TABLES.get(ddl_file)
        if skip_existing and table and table_exists(engine, table):
            logger.info(f"Table {table} already exists, skipping {ddl_file}")
            continue
        try:
            SchemaInitializer(engine, ddl_file).init()
        except SchemaInitializationError as e:
            logger.error(f"Schema initialization failed: {e}")
            return False
    return True


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--database-url", help="Override DATABASE_URL")
    parser.add_argument(
        "--ddl",
        action="append",
        dest="ddl_files",
        help=f"DDL resource to run (repeatable, default: {DDL_FILE_NAME} {PRODUCTS_DDL_FILE_NAME})",
    )
    parser.add_argument("--skip-existing", action="store_true", help="Skip scripts whose table exists")
    parser.add_argument("--max-retries", type=int, default=30)
    parser.add_argument("--retry-interval", type=int, default=2)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the schema script.

    Returns:
        Exit code (0 = success, 1 = failure)
    """
    args = parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="[%(asctime)s] %(levelname)s - %(message)s",
    )

    engine = create_db_engine(args.database_url)
    try:
        if not wait_for_db(engine, args.max_retries, args.retry_interval):
            logger.error("Database is not available. Exiting.")
            return 1

        ddl_files = args.ddl_files or [DDL_FILE_NAME, PRODUCTS_DDL_FILE_NAME]
        if not init_schema(engine, ddl_files, skip_existing=args.skip_existing):
            return 1
    finally:
        engine.dispose()

    logger.info("Schema initialization completed successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
