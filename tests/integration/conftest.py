import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from intake.config.settings import Settings
from intake.database.connection import close_pool, get_connection, init_pool

SCRATCH_TABLE = "intake_it_rows"
SCRATCH_CLIENTS = "intake_it_clients"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "food_vision_test")
    os.environ.setdefault("DB_POOL_TIMEOUT_SECONDS", "5")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
    except Exception as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def scratch_tables(db_conn: psycopg.Connection[Any]) -> Generator[None, None, None]:
    """Create throwaway tables shaped like the item and clients tables."""
    db_conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {SCRATCH_TABLE} (
            id SERIAL PRIMARY KEY,
            client_id TEXT,
            name TEXT NOT NULL,
            notes TEXT,
            reference_image_urls TEXT[]
        )
        """
    )
    db_conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {SCRATCH_CLIENTS} (
            client_id TEXT PRIMARY KEY,
            remaining_servings INTEGER
        )
        """
    )
    db_conn.commit()
    try:
        yield
    finally:
        db_conn.execute(f"DROP TABLE IF EXISTS {SCRATCH_TABLE}")
        db_conn.execute(f"DROP TABLE IF EXISTS {SCRATCH_CLIENTS}")
        db_conn.commit()
