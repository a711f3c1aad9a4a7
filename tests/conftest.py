"""
Pytest configuration for liteorm.

Provides fixtures for:
- Settings isolated from the process environment
- A throwaway SQLite database file per test
- ORM, users table and model instances wired to that database
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from liteorm.config import Settings
from liteorm.database import migrate
from liteorm.infrastructure import SQLiteConnection, SQLiteORM
from liteorm.models import User
from liteorm.utils.logging import LogSystem

ITEMS_DDL = """
CREATE TABLE items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    qty INTEGER,
    price REAL,
    payload BLOB
)
""".strip()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings fixture with test-specific overrides; ignores any `.env` file.
    """
    return Settings(
        _env_file=None,
        app_env="testing",
        db_dir=str(tmp_path / "database"),
        log_dir=str(tmp_path / "storage"),
        log_level="DEBUG",
    )


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    return tmp_path / "storage"


@pytest.fixture
def log_system(log_dir: Path) -> Generator[LogSystem, None, None]:
    log = LogSystem(log_dir)
    yield log
    log.close()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Database location without a suffix; the connection appends `.sqlite`."""
    return tmp_path / "database" / "test-db"


@pytest.fixture
def connection(db_path: Path, log_system: LogSystem) -> Generator[SQLiteConnection, None, None]:
    conn = SQLiteConnection(db_path, log_system, connect_attempts=1)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def orm(connection: SQLiteConnection) -> SQLiteORM:
    return SQLiteORM(connection)


@pytest.fixture
def items_table(orm: SQLiteORM) -> str:
    """A generic table with integer, real, text and blob columns."""
    assert orm.create_table(ITEMS_DDL, ["CREATE INDEX idx_items_name ON items (name)"]) is True
    return "items"


@pytest.fixture
def users_table(orm: SQLiteORM) -> str:
    assert migrate(orm) is True
    return "users"


@pytest.fixture
def user_model(orm: SQLiteORM, users_table: str) -> User:
    return User(orm)
