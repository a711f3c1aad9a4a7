"""
Schema for the bundled ``users`` table.

Applied programmatically through `SQLiteORM.create_table`. ``updated_at`` is
refreshed by a trigger whenever a row changes without setting it explicitly.
"""

from __future__ import annotations

from typing import Union

from liteorm.errors import StorageFailure
from liteorm.infrastructure.orm import SQLiteORM

USERS_TABLE = "users"

USERS_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name VARCHAR(255) NOT NULL,
    email VARCHAR(255) NOT NULL,
    password TEXT NOT NULL,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
""".strip()

USERS_INDEX_DDLS = (
    "CREATE INDEX IF NOT EXISTS idx_name ON users (name)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_email ON users (email)",
    """
    CREATE TRIGGER IF NOT EXISTS trg_users_updated_at
    AFTER UPDATE ON users
    FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
    BEGIN
        UPDATE users SET updated_at = CURRENT_TIMESTAMP WHERE id = NEW.id;
    END
    """.strip(),
)


def migrate(orm: SQLiteORM) -> Union[bool, StorageFailure]:
    """Create the users table, its indexes and trigger (idempotent)."""
    return orm.create_table(USERS_TABLE_DDL, USERS_INDEX_DDLS)


def rollback(orm: SQLiteORM) -> Union[bool, StorageFailure]:
    """Drop the users table; its indexes and trigger go with it."""
    return orm.drop_table(USERS_TABLE)


__all__ = ["USERS_INDEX_DDLS", "USERS_TABLE", "USERS_TABLE_DDL", "migrate", "rollback"]
