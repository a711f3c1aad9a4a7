"""
liteorm - a small data-access layer for a single embedded SQLite database.

This package provides:

- A connection manager that prepares and opens the database file
- Schema introspection over SQLite's catalog
- A generic ORM with CRUD, counting, pagination and transactional bulk writes
- A declarative, rule-driven payload validator
- A base model applying fillable, hidden and cast policies per entity

Every storage failure is logged and returned as a falsy failure value; engine
exceptions never cross the ORM boundary.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from liteorm.config import Settings, get_settings
from liteorm.domain import CastDirective, Condition, ModelSpec, Page, Record
from liteorm.errors import (
    ConnectionFailure,
    NotFound,
    StorageFailure,
    ValidationFailure,
    is_failure,
)
from liteorm.infrastructure import SchemaIntrospector, SQLiteConnection, SQLiteORM, open_connection
from liteorm.models import Model, User
from liteorm.utils.logging import LogLevel, LogSystem, configure_logging, get_logger
from liteorm.validation import Validator

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "CastDirective",
    "Condition",
    "ModelSpec",
    "Page",
    "Record",
    # Failures
    "ConnectionFailure",
    "NotFound",
    "StorageFailure",
    "ValidationFailure",
    "is_failure",
    # Storage
    "SQLiteConnection",
    "SQLiteORM",
    "SchemaIntrospector",
    "open_connection",
    # Models
    "Model",
    "User",
    # Validation
    "Validator",
    # Logging
    "LogLevel",
    "LogSystem",
    "configure_logging",
    "get_logger",
]
