"""
Infrastructure package for liteorm.

Centralizes database concerns: the connection manager, schema introspection,
SQL fragment helpers and the generic ORM. Keep this layer focused on I/O and
resource management, decoupled from entity semantics.
"""

from liteorm.infrastructure.connection import SQLiteConnection, open_connection
from liteorm.infrastructure.orm import SQLiteORM
from liteorm.infrastructure.schema import SchemaIntrospector

__all__ = [
    "SQLiteConnection",
    "SQLiteORM",
    "SchemaIntrospector",
    "open_connection",
]
