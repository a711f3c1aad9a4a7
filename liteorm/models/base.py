"""
Base model: per-entity configuration applied around the generic ORM.

Subclasses declare the backing table and the column policies as class
attributes; they are validated into a `ModelSpec` when the subclass is
defined, so a bad cast directive fails at import time rather than on the first
read.

    class User(Model):
        table = "users"
        fillable = ("name", "email")
        hidden = ("password",)
        casts = {"created_at": "datetime:%d.%m.%Y %H:%M"}

Writes are filtered down to `fillable` before they reach the ORM. Reads are
cast and then stripped of `hidden` columns; failure values pass through
untouched.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Mapping, Optional, Sequence, Union

from liteorm.domain.models import Condition, ModelSpec, Page, Record
from liteorm.errors import NotFound, StorageFailure, ValidationFailure
from liteorm.infrastructure.orm import SQLiteORM
from liteorm.validation import RuleSet, Validator


class Model:
    table: ClassVar[str] = ""
    per_page: ClassVar[int] = 50
    fillable: ClassVar[Sequence[str]] = ()
    hidden: ClassVar[Sequence[str]] = ()
    casts: ClassVar[Mapping[str, str]] = {}
    rules: ClassVar[RuleSet] = {}

    spec: ClassVar[Optional[ModelSpec]] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.table:
            cls.spec = ModelSpec(
                table=cls.table,
                per_page=cls.per_page,
                fillable=tuple(cls.fillable),
                hidden=tuple(cls.hidden),
                casts=dict(cls.casts),
            )

    def __init__(self, orm: SQLiteORM, validator: Optional[Validator] = None) -> None:
        if self.spec is None:
            raise TypeError(f"{type(self).__name__} does not declare a table")
        self._spec: ModelSpec = self.spec
        self.orm = orm
        self.validator = validator or Validator()

    # -- shaping ----------------------------------------------------------

    def present(self, record: Record) -> Record:
        """Apply casts to the columns present, then drop hidden columns."""
        shaped = dict(record)
        for column, directive in self._spec.casts.items():
            if column in shaped:
                shaped[column] = directive.apply(shaped[column])
        for column in self._spec.hidden:
            shaped.pop(column, None)
        return shaped

    def fill(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Keep only fillable columns; an empty fillable set keeps everything."""
        if not self._spec.fillable:
            return dict(payload)
        return {key: value for key, value in payload.items() if key in self._spec.fillable}

    def _shape(self, result: Any) -> Any:
        if isinstance(result, dict):
            return self.present(result)
        return result

    # -- reads ------------------------------------------------------------

    def all(self) -> Union[List[Record], StorageFailure]:
        result = self.orm.all(self._spec.table)
        if isinstance(result, list):
            return [self.present(record) for record in result]
        return result

    def fetch(self, record_id: int) -> Union[Record, NotFound, StorageFailure]:
        return self._shape(self.orm.fetch(self._spec.table, record_id))

    def find(self, conditions: Sequence[Condition]) -> Union[Record, NotFound, StorageFailure]:
        return self._shape(self.orm.find(self._spec.table, conditions))

    def paginate(
        self, page: int = 1, per_page: Optional[int] = None
    ) -> Union[Page, StorageFailure]:
        if per_page is None:
            per_page = self._spec.per_page
        result = self.orm.paginate(self._spec.table, page, per_page)
        if isinstance(result, StorageFailure):
            return result
        return Page(
            data=[self.present(record) for record in result["data"]],
            total=result["total"],
            page=result["page"],
            per_page=result["per_page"],
        )

    def get_columns(
        self, with_types: bool = False
    ) -> Union[List[str], Dict[str, str], StorageFailure]:
        return self.orm.get_columns(self._spec.table, with_types)

    def count(self, conditions: Optional[Mapping[str, Any]] = None) -> Union[int, StorageFailure]:
        return self.orm.count(self._spec.table, conditions)

    # -- writes -----------------------------------------------------------

    def save(self, payload: Mapping[str, Any]) -> Union[int, bool, StorageFailure]:
        return self.orm.save(self._spec.table, self.fill(payload))

    def save_bulk(self, payloads: Sequence[Mapping[str, Any]]) -> Union[bool, StorageFailure]:
        return self.orm.save_bulk(self._spec.table, [self.fill(p) for p in payloads])

    def update(
        self, record_id: int, payload: Mapping[str, Any]
    ) -> Union[bool, NotFound, StorageFailure]:
        return self.orm.update(self._spec.table, record_id, self.fill(payload))

    def update_bulk(
        self, ids: Sequence[int], payload: Mapping[str, Any]
    ) -> Union[bool, NotFound, StorageFailure]:
        return self.orm.update_bulk(self._spec.table, ids, self.fill(payload))

    def delete(self, record_id: int) -> Union[bool, NotFound, StorageFailure]:
        return self.orm.delete(self._spec.table, record_id)

    def delete_bulk(self, ids: Sequence[int]) -> Union[bool, NotFound, StorageFailure]:
        return self.orm.delete_bulk(self._spec.table, ids)

    # -- validation -------------------------------------------------------

    def validate(
        self, payload: Mapping[str, Any], rules: Optional[RuleSet] = None
    ) -> ValidationFailure:
        """Validate against `rules`, or the model's own rule set."""
        return self.validator.validate(rules if rules is not None else self.rules, payload)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(table={self.table!r})"


__all__ = ["Model"]
