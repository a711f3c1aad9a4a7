"""
Schema introspection through SQLite's catalog.

Column lists are read from ``PRAGMA table_info`` on every call and never
cached, so they always reflect the live schema.
"""

from __future__ import annotations

import sqlite3
from typing import Dict, List, Union

from liteorm.errors import DataAccessError, StorageFailure
from liteorm.infrastructure.binding import quote_identifier
from liteorm.infrastructure.connection import SQLiteConnection
from liteorm.utils.logging import LogLevel, LogSystem

LOG_CHANNEL = "db_sqlite_orm_log"


class SchemaIntrospector:
    def __init__(self, connection: SQLiteConnection, log: LogSystem) -> None:
        self.connection = connection
        self.log = log

    def column_info(self, table: str) -> Dict[str, str]:
        """
        Return ``{name: declared type}`` in physical column order.

        Raises `sqlite3.Error` or `DataAccessError`; `columns` is the
        non-raising variant.
        """
        handle = self.connection.require_handle()
        rows = handle.execute(f"PRAGMA table_info({quote_identifier(table)})").fetchall()
        return {row["name"]: row["type"] or "" for row in rows}

    def columns(
        self, table: str, with_types: bool = False
    ) -> Union[List[str], Dict[str, str], StorageFailure]:
        """
        Column names of `table`, or a name -> declared type mapping.

        An unknown table yields an empty result, not a failure.
        """
        try:
            info = self.column_info(table)
        except (sqlite3.Error, DataAccessError) as exc:
            message = "An error occurred while retrieving the columns for the selected resource."
            self.log.handle(
                LogLevel.ERROR,
                {
                    "message": message,
                    "operation": "columns",
                    "db_error": str(exc),
                    "table": table,
                },
                LOG_CHANNEL,
            )
            return StorageFailure(operation="columns", table=table, message=message)

        if with_types:
            return info
        return list(info)


__all__ = ["SchemaIntrospector"]
