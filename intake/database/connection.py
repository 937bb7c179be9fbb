from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

from intake.config.settings import Settings

_pool: ConnectionPool | None = None


def pool_size_for(settings: Settings) -> int:
    """One connection per stage worker, plus one for the quota guard."""
    return max(settings.pipeline_concurrency + 1, 2)


def init_pool(settings: Settings) -> None:
    """Open the global pool and wait until a first connection is usable.

    Raises psycopg_pool.PoolTimeout when the database cannot be reached
    within db_pool_timeout_seconds.
    """
    global _pool  # noqa: PLW0603
    conninfo = make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
    )
    pool = ConnectionPool(
        conninfo,
        min_size=1,
        max_size=pool_size_for(settings),
        timeout=settings.db_pool_timeout_seconds,
        open=True,
    )
    try:
        pool.wait(timeout=settings.db_pool_timeout_seconds)
    except Exception:
        pool.close()
        raise
    _pool = pool


def close_pool() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Borrow a pooled connection. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn
