"""
Domain types shared by the ORM and the model layer.

Records travel as plain dictionaries; the pydantic `ModelSpec` captures the
per-entity configuration (table, page size, fillable, hidden and cast map) and
validates it once, when a model class is defined.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Tuple, TypedDict, Union

from pydantic import BaseModel, Field, field_validator

from liteorm.domain.casts import CastDirective

Record = Dict[str, Any]

# (column, value) or (column, operator, value)
Condition = Union[Tuple[str, Any], Tuple[str, str, Any], List[Any]]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Page(TypedDict):
    """
    One page of records.

    `total` counts the whole table and is identical across pages.
    """

    data: List[Record]
    total: int
    page: int
    per_page: int


class ModelSpec(BaseModel):
    """
    Static configuration of one entity type.
    """

    table: str = Field(..., description="Backing table name.")
    per_page: int = Field(50, gt=0, description="Default page size.")
    fillable: Tuple[str, ...] = Field((), description="Write whitelist; empty disables filtering.")
    hidden: Tuple[str, ...] = Field((), description="Columns masked from every read.")
    casts: Dict[str, CastDirective] = Field(default_factory=dict, description="Column -> cast.")

    model_config = {
        "frozen": True,
        "arbitrary_types_allowed": True,
    }

    @field_validator("table")
    @classmethod
    def _table_is_identifier(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            raise ValueError(f"invalid table name {value!r}")
        return value

    @field_validator("casts", mode="before")
    @classmethod
    def _parse_casts(cls, value: Any) -> Dict[str, CastDirective]:
        if not isinstance(value, dict):
            raise ValueError("casts must be a mapping of column -> directive")
        return {
            column: spec if isinstance(spec, CastDirective) else CastDirective.parse(spec)
            for column, spec in value.items()
        }


__all__ = ["Condition", "ModelSpec", "Page", "Record"]
