"""
Connection management for the embedded SQLite database.

`SQLiteConnection` owns exactly one handle to one database file. On
construction it makes sure the file and its directory exist and are writable,
then opens the handle with retry logic for transient failures (tenacity). It
never raises: a failed open is recorded as a `ConnectionFailure` and logged,
and every later ORM call on the connection fails individually.
"""

from __future__ import annotations

import os
import sqlite3
import stat
from pathlib import Path
from typing import Optional, Union

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from liteorm.config import Settings, get_settings, with_db_suffix
from liteorm.errors import ConnectionFailure, ConnectionUnavailableError
from liteorm.utils.logging import LogLevel, LogSystem

LOG_CHANNEL = "db_sqlite_log"

DIR_MODE = 0o775
FILE_MODE = 0o664


def _connect(path: Path, attempts: int) -> sqlite3.Connection:
    """
    Open a SQLite handle, retrying transient `sqlite3.OperationalError`s.

    Autocommit mode: single statements commit immediately and bulk operations
    issue their own BEGIN/COMMIT.
    """

    @retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        retry=retry_if_exception_type(sqlite3.OperationalError),
        reraise=True,
    )
    def _open() -> sqlite3.Connection:
        handle = sqlite3.connect(str(path), isolation_level=None)
        handle.row_factory = sqlite3.Row
        handle.execute("PRAGMA foreign_keys = ON")
        return handle

    return _open()


class SQLiteConnection:
    """
    Exclusive owner of one SQLite database handle.

    Example
    -------
        with SQLiteConnection("database/app-db-dev") as connection:
            orm = SQLiteORM(connection)
            orm.all("users")
    """

    def __init__(
        self,
        path: Union[str, Path],
        log: Optional[LogSystem] = None,
        *,
        connect_attempts: int = 3,
        owns_log: bool = False,
    ) -> None:
        self.path = with_db_suffix(Path(path))
        self.log = log or LogSystem()
        self.owns_log = owns_log
        self.connect_attempts = connect_attempts
        self.failure: Optional[ConnectionFailure] = None
        self._handle: Optional[sqlite3.Connection] = None

        self._ensure_db_exists()
        self._ensure_writable()
        self._connect()

    @property
    def handle(self) -> Optional[sqlite3.Connection]:
        """The live `sqlite3.Connection`, or None when closed or never opened."""
        return self._handle

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def require_handle(self) -> sqlite3.Connection:
        if self._handle is None:
            raise ConnectionUnavailableError(f"no open connection to {self.path}")
        return self._handle

    def close(self) -> None:
        """
        Release the handle, and the log files too when `owns_log` is set.

        Safe to call more than once.
        """
        try:
            if self._handle is not None:
                self._handle.close()
        finally:
            self._handle = None
            if self.owns_log:
                self.log.close()

    def __enter__(self) -> "SQLiteConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"SQLiteConnection(path={str(self.path)!r}, {state})"

    def _fail(self, message: str, error: Exception) -> None:
        self.failure = ConnectionFailure(path=str(self.path), message=message)
        self.log.handle(
            LogLevel.ERROR,
            {
                "message": message,
                "db_error": str(error),
                "path": str(self.path),
            },
            LOG_CHANNEL,
        )

    def _ensure_db_exists(self) -> None:
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
            self.path.touch(mode=FILE_MODE)
        except OSError as exc:
            self._fail("Error creating the database file.", exc)
            return

        self.log.handle(
            LogLevel.INFO,
            {"message": f"Database file was successfully created at {self.path}"},
            LOG_CHANNEL,
        )

    def _ensure_writable(self) -> None:
        """Try one chmod on a read-only file; a failure is logged, not recorded."""
        if not self.path.exists() or os.access(self.path, os.W_OK):
            return
        error = "File does not have write permissions."
        try:
            mode = self.path.stat().st_mode
            self.path.chmod(mode | stat.S_IWUSR | stat.S_IWGRP)
        except OSError as exc:
            error = str(exc)

        if not os.access(self.path, os.W_OK):
            self.log.handle(
                LogLevel.ERROR,
                {
                    "message": "Failed to set write permissions on the database file.",
                    "db_error": error,
                    "path": str(self.path),
                },
                LOG_CHANNEL,
            )

    def _connect(self) -> None:
        try:
            self._handle = _connect(self.path, self.connect_attempts)
        except sqlite3.Error as exc:
            self._handle = None
            self._fail("Error connecting to the database.", exc)


def open_connection(
    settings: Optional[Settings] = None,
    log: Optional[LogSystem] = None,
) -> SQLiteConnection:
    """
    Open the database configured for the current environment.

    Parameters
    ----------
    settings : Settings, optional
        Explicit configuration; falls back to the cached process settings.
    log : LogSystem, optional
        Logging collaborator; defaults to one writing under ``settings.log_dir``.
    """
    settings = settings or get_settings()
    return SQLiteConnection(
        settings.database_path(),
        log or LogSystem(settings.log_dir),
        connect_attempts=settings.db_connect_attempts,
        owns_log=log is None,
    )


__all__ = ["LOG_CHANNEL", "SQLiteConnection", "open_connection"]
