"""Engine helpers acting as the connection provider for DAOs."""
from __future__ import annotations

from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from .config import get_settings


def create_db_engine(url: str | None = None, *, echo: bool | None = None) -> Engine:
    """Create a pooled engine for the configured (or given) database URL.

    Args:
        url: SQLAlchemy database URL; defaults to ``Settings.database_url``
        echo: Log emitted SQL; defaults to ``Settings.database_echo``

    Returns:
        Engine whose ``connect()``/``begin()`` hand out scoped connections
    """
    settings = get_settings()
    return create_engine(
        url or settings.database_url,
        echo=settings.database_echo if echo is None else echo,
        future=True,
        pool_pre_ping=True,
    )


@lru_cache
def get_engine() -> Engine:
    """Return the process-wide engine built from settings."""

    return create_db_engine()


def dispose_engine() -> None:
    """Close pooled connections of the process-wide engine, if one was created."""

    if get_engine.cache_info().currsize:
        get_engine().dispose()
        get_engine.cache_clear()
