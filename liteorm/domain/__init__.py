"""
Domain package for liteorm.

Exports the record, condition and page types plus the model configuration and
cast directives. Keep this package focused on data definitions and value
transforms; it must not touch the database.
"""

from liteorm.domain.casts import CastDirective, CastKind, parse_datetime
from liteorm.domain.models import Condition, ModelSpec, Page, Record

__all__ = [
    "CastDirective",
    "CastKind",
    "Condition",
    "ModelSpec",
    "Page",
    "Record",
    "parse_datetime",
]
