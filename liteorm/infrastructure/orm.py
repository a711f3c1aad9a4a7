"""
Generic table-level ORM over one SQLite connection.

`SQLiteORM` knows table names, column maps and raw values, nothing about
entity semantics. Every public operation catches engine errors at its
boundary, logs them on the ``db_sqlite_orm_log`` channel with the operation
context, and returns a failure value (`StorageFailure`, `NotFound`, ``False``)
instead of raising.

Identifiers are validated and quoted before interpolation; columns used for
writes and lookups must exist in the introspected schema. Values are always
bound as parameters, typed by `bind_value`.
"""

from __future__ import annotations

import re
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, List, Mapping, Optional, Sequence, Union

from liteorm.domain.models import Condition, Page, Record
from liteorm.errors import DataAccessError, InvalidIdentifierError, NotFound, StorageFailure
from liteorm.infrastructure.binding import (
    bind_value,
    placeholders,
    quote_identifier,
    require_columns,
    split_condition,
)
from liteorm.infrastructure.connection import SQLiteConnection
from liteorm.infrastructure.schema import SchemaIntrospector
from liteorm.utils.logging import LogLevel, LogSystem, get_logger

LOG_CHANNEL = "db_sqlite_orm_log"

# Stay well below SQLite's host-parameter limit for IN (...) lists.
ID_CHUNK_SIZE = 500

_MESSAGES = {
    "table_exists": "An error occurred while checking if the resource exists.",
    "create_table": "An error occurred while creating the resource.",
    "drop_table": "An error occurred while dropping the resource.",
    "all": "An error occurred while retrieving the records for the selected resource.",
    "fetch": "An error occurred while retrieving the record.",
    "find": "An error occurred while finding the record in the selected resource.",
    "count": "An error occurred while counting the records for the selected resource.",
    "paginate": "An error occurred while retrieving the pagination for the selected resource.",
    "save": "An error occurred while saving the record in the selected resource.",
    "save_bulk": "An error occurred while saving the records in the selected resource.",
    "update": "An error occurred while updating the record in the selected resource.",
    "update_bulk": "An error occurred while updating the records in the selected resource.",
    "delete": "An error occurred while deleting the record in the selected resource.",
    "delete_bulk": "An error occurred while deleting the records in the selected resource.",
}

_DDL_TARGET = re.compile(
    r"^\s*CREATE\s+(?:TEMP(?:ORARY)?\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?[\"`\[]?(\w+)",
    re.IGNORECASE,
)

log = get_logger(__name__)

# sqlite3 raises OverflowError for ints past 64 bits, e.g. a huge LIMIT or OFFSET.
_Errors = (sqlite3.Error, DataAccessError, OverflowError)


def _chunks(ids: Sequence[Any], size: int = ID_CHUNK_SIZE) -> Iterable[Sequence[Any]]:
    for start in range(0, len(ids), size):
        yield ids[start : start + size]


class SQLiteORM:
    """
    CRUD, counting, pagination and bulk writes for any table.

    Parameters
    ----------
    connection : SQLiteConnection
        The exclusively owned connection to operate on.
    log : LogSystem, optional
        Logging collaborator; defaults to the connection's.
    """

    def __init__(self, connection: SQLiteConnection, log: Optional[LogSystem] = None) -> None:
        self.connection = connection
        self.log = log or connection.log
        self.schema = SchemaIntrospector(connection, self.log)

    # -- plumbing ---------------------------------------------------------

    def _db(self) -> sqlite3.Connection:
        return self.connection.require_handle()

    def _failure(
        self,
        operation: str,
        table: str,
        exc: Exception,
        level: LogLevel = LogLevel.ERROR,
        **context: Any,
    ) -> StorageFailure:
        message = _MESSAGES[operation]
        self.log.handle(
            level,
            {
                "message": message,
                "operation": operation,
                "table": table,
                "db_error": str(exc),
                **context,
            },
            LOG_CHANNEL,
        )
        return StorageFailure(operation=operation, table=table, message=message)

    @contextmanager
    def _transaction(self, db: sqlite3.Connection) -> Generator[sqlite3.Connection, None, None]:
        """BEGIN ... COMMIT, rolling back on any exception."""
        db.execute("BEGIN")
        try:
            yield db
            db.execute("COMMIT")
        except BaseException:
            if db.in_transaction:
                db.execute("ROLLBACK")
            raise

    def _bound(self, values: Iterable[Any], types: Sequence[Optional[str]]) -> List[Any]:
        return [bind_value(value, declared).value for value, declared in zip(values, types)]

    def _id_param(self, record_id: Any) -> Any:
        return bind_value(record_id, "INTEGER").value

    # -- schema -----------------------------------------------------------

    def table_exists(self, name: str) -> bool:
        """True if `name` is a table; never raises."""
        try:
            row = self._db().execute(
                "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (name,)
            ).fetchone()
        except _Errors as exc:
            self._failure("table_exists", name, exc)
            return False
        return row is not None

    def create_table(self, ddl: str, index_ddls: Sequence[str] = ()) -> Union[bool, StorageFailure]:
        """
        Run one CREATE TABLE statement, then each index statement in order.

        The first failing statement aborts the rest.
        """
        match = _DDL_TARGET.match(ddl)
        table = match.group(1) if match else ""
        statement = ddl
        try:
            db = self._db()
            for statement in (ddl, *index_ddls):
                db.execute(statement)
        except _Errors as exc:
            return self._failure("create_table", table, exc, statement=statement)
        log.debug("Table created", extra={"table": table, "indexes": len(index_ddls)})
        return True

    def drop_table(self, name: str) -> Union[bool, StorageFailure]:
        """Drop `name` if it exists."""
        try:
            self._db().execute(f"DROP TABLE IF EXISTS {quote_identifier(name)}")
        except _Errors as exc:
            return self._failure("drop_table", name, exc)
        return True

    def get_columns(
        self, table: str, with_types: bool = False
    ) -> Union[List[str], Dict[str, str], StorageFailure]:
        return self.schema.columns(table, with_types)

    # -- reads ------------------------------------------------------------

    def all(self, table: str) -> Union[List[Record], StorageFailure]:
        try:
            rows = self._db().execute(f"SELECT * FROM {quote_identifier(table)}").fetchall()
        except _Errors as exc:
            return self._failure("all", table, exc)
        return [dict(row) for row in rows]

    def fetch(self, table: str, record_id: int) -> Union[Record, NotFound, StorageFailure]:
        """Look a record up by its primary key ``id``."""
        try:
            row = self._db().execute(
                f"SELECT * FROM {quote_identifier(table)} WHERE id = ?",
                (self._id_param(record_id),),
            ).fetchone()
        except _Errors as exc:
            return self._failure("fetch", table, exc, id=record_id)
        if row is None:
            return NotFound(table, {"id": record_id})
        return dict(row)

    def find(
        self, table: str, conditions: Sequence[Condition]
    ) -> Union[Record, NotFound, StorageFailure]:
        """
        First record matching every condition (AND), or `NotFound`.

        Conditions are ``(column, value)`` for equality or
        ``(column, operator, value)``.
        """
        try:
            types = self.schema.column_info(table)
            clauses: List[str] = []
            params: List[Any] = []
            for condition in conditions:
                column, operator, value = split_condition(condition)
                require_columns([column], types, table)
                clauses.append(f"{quote_identifier(column)} {operator} ?")
                params.append(bind_value(value, types[column]).value)

            sql = f"SELECT * FROM {quote_identifier(table)}"
            if clauses:
                sql += " WHERE " + " AND ".join(clauses)
            sql += " LIMIT 1"
            row = self._db().execute(sql, params).fetchone()
        except _Errors as exc:
            return self._failure(
                "find", table, exc, conditions=[list(condition) for condition in conditions]
            )
        if row is None:
            return NotFound(table, {"conditions": [list(condition) for condition in conditions]})
        return dict(row)

    def count(
        self, table: str, conditions: Optional[Mapping[str, Any]] = None
    ) -> Union[int, StorageFailure]:
        """Count rows, optionally filtered by column = value pairs."""
        conditions = dict(conditions or {})
        try:
            sql = f"SELECT COUNT(id) AS cnt FROM {quote_identifier(table)}"
            params: List[Any] = []
            if conditions:
                types = self.schema.column_info(table)
                require_columns(conditions, types, table)
                sql += " WHERE " + " AND ".join(
                    f"{quote_identifier(column)} = ?" for column in conditions
                )
                params = self._bound(conditions.values(), [types[c] for c in conditions])
            row = self._db().execute(sql, params).fetchone()
        except _Errors as exc:
            return self._failure("count", table, exc, conditions=conditions)
        return int(row["cnt"] or 0)

    def paginate(
        self, table: str, page: int = 1, per_page: int = 50
    ) -> Union[Page, StorageFailure]:
        """
        One page of the whole table, ordered by ``id``.

        `total` is the unfiltered row count of the table.
        """
        if page < 1 or per_page < 1:
            return self._failure(
                "paginate",
                table,
                InvalidIdentifierError("page and per_page must be positive"),
                level=LogLevel.WARNING,
                page=page,
                per_page=per_page,
            )
        try:
            db = self._db()
            quoted = quote_identifier(table)
            total = db.execute(f"SELECT COUNT(id) FROM {quoted}").fetchone()[0]
            rows = db.execute(
                f"SELECT * FROM {quoted} ORDER BY id LIMIT ? OFFSET ?",
                (per_page, (page - 1) * per_page),
            ).fetchall()
        except _Errors as exc:
            return self._failure("paginate", table, exc, page=page, per_page=per_page)
        return Page(data=[dict(row) for row in rows], total=int(total), page=page, per_page=per_page)

    # -- writes -----------------------------------------------------------

    def _insert_sql(self, table: str, columns: Sequence[str]) -> str:
        quoted = quote_identifier(table)
        if not columns:
            return f"INSERT INTO {quoted} DEFAULT VALUES"
        names = ", ".join(quote_identifier(column) for column in columns)
        return f"INSERT INTO {quoted} ({names}) VALUES ({placeholders(len(columns))})"

    def save(self, table: str, payload: Mapping[str, Any]) -> Union[int, bool, StorageFailure]:
        """
        Insert one record.

        Returns the new row id, or ``False`` if no row was inserted.
        """
        columns = list(payload)
        try:
            types = self.schema.column_info(table)
            require_columns(columns, types, table)
            cursor = self._db().execute(
                self._insert_sql(table, columns),
                self._bound(payload.values(), [types[c] for c in columns]),
            )
        except _Errors as exc:
            return self._failure("save", table, exc, columns=columns)
        return cursor.lastrowid if cursor.rowcount > 0 else False

    def save_bulk(
        self, table: str, payloads: Sequence[Mapping[str, Any]]
    ) -> Union[bool, StorageFailure]:
        """
        Insert many records in one transaction, all or nothing.

        The statement is prepared from the first payload's columns; every
        payload must carry exactly that column set.
        """
        payloads = list(payloads)
        if not payloads:
            return True
        columns = list(payloads[0])
        try:
            types = self.schema.column_info(table)
            require_columns(columns, types, table)
            sql = self._insert_sql(table, columns)
            declared = [types[c] for c in columns]
            expected = set(columns)
            db = self._db()
            with self._transaction(db):
                for index, payload in enumerate(payloads):
                    if set(payload) != expected:
                        raise InvalidIdentifierError(
                            f"payload {index} does not match the columns of the first payload"
                        )
                    db.execute(sql, self._bound((payload[c] for c in columns), declared))
        except _Errors as exc:
            return self._failure("save_bulk", table, exc, columns=columns, records=len(payloads))
        return True

    def _set_clause(self, table: str, payload: Mapping[str, Any]) -> tuple:
        if not payload:
            raise DataAccessError("nothing to update: empty payload")
        columns = list(payload)
        types = self.schema.column_info(table)
        require_columns(columns, types, table)
        clause = ", ".join(f"{quote_identifier(column)} = ?" for column in columns)
        return clause, self._bound(payload.values(), [types[c] for c in columns])

    def update(
        self, table: str, record_id: int, payload: Mapping[str, Any]
    ) -> Union[bool, NotFound, StorageFailure]:
        """
        Update one record by ``id``.

        Returns ``True`` when a row matched (even if no value changed) and
        `NotFound` when none did.
        """
        try:
            clause, params = self._set_clause(table, payload)
            cursor = self._db().execute(
                f"UPDATE {quote_identifier(table)} SET {clause} WHERE id = ?",
                [*params, self._id_param(record_id)],
            )
        except _Errors as exc:
            return self._failure("update", table, exc, id=record_id, columns=list(payload))
        if cursor.rowcount > 0:
            return True
        return NotFound(table, {"id": record_id})

    def update_bulk(
        self, table: str, ids: Sequence[int], payload: Mapping[str, Any]
    ) -> Union[bool, NotFound, StorageFailure]:
        """Apply the same update to every record whose ``id`` is in `ids`."""
        ids = list(ids)
        try:
            clause, params = self._set_clause(table, payload)
            sql = f"UPDATE {quote_identifier(table)} SET {clause} WHERE id IN "
            db = self._db()
            affected = 0
            with self._transaction(db):
                for chunk in _chunks(ids):
                    cursor = db.execute(
                        sql + f"({placeholders(len(chunk))})",
                        [*params, *(self._id_param(i) for i in chunk)],
                    )
                    affected += max(cursor.rowcount, 0)
        except _Errors as exc:
            return self._failure("update_bulk", table, exc, ids=ids, columns=list(payload))
        if affected > 0:
            return True
        return NotFound(table, {"ids": ids})

    def delete(self, table: str, record_id: int) -> Union[bool, NotFound, StorageFailure]:
        try:
            cursor = self._db().execute(
                f"DELETE FROM {quote_identifier(table)} WHERE id = ?",
                (self._id_param(record_id),),
            )
        except _Errors as exc:
            return self._failure("delete", table, exc, id=record_id)
        if cursor.rowcount > 0:
            return True
        return NotFound(table, {"id": record_id})

    def delete_bulk(self, table: str, ids: Sequence[int]) -> Union[bool, NotFound, StorageFailure]:
        """Delete every record whose ``id`` is in `ids`, in one transaction."""
        ids = list(ids)
        try:
            sql = f"DELETE FROM {quote_identifier(table)} WHERE id IN "
            db = self._db()
            affected = 0
            with self._transaction(db):
                for chunk in _chunks(ids):
                    cursor = db.execute(
                        sql + f"({placeholders(len(chunk))})",
                        [self._id_param(i) for i in chunk],
                    )
                    affected += max(cursor.rowcount, 0)
        except _Errors as exc:
            return self._failure("delete_bulk", table, exc, ids=ids)
        if affected > 0:
            return True
        return NotFound(table, {"ids": ids})


__all__ = ["ID_CHUNK_SIZE", "LOG_CHANNEL", "SQLiteORM"]
