from __future__ import annotations

import pytest
from pydantic import ValidationError

from liteorm.domain import CastDirective, CastKind, ModelSpec
from liteorm.models import Model, User


def test_model_spec_parses_casts():
    spec = ModelSpec(table="users", casts={"age": "int", "seen_at": "datetime:%Y"})
    assert spec.casts["age"] == CastDirective(CastKind.INT)
    assert spec.casts["seen_at"].format == "%Y"
    assert spec.per_page == 50
    assert spec.fillable == ()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"table": "users; drop"},
        {"table": "users", "per_page": 0},
        {"table": "users", "casts": {"age": "money"}},
    ],
)
def test_model_spec_rejects_bad_configuration(kwargs):
    with pytest.raises(ValidationError):
        ModelSpec(**kwargs)


def test_model_spec_is_frozen():
    spec = ModelSpec(table="users")
    with pytest.raises(ValidationError):
        spec.table = "other"


def test_subclass_spec_is_built_at_definition_time():
    assert User.spec is not None
    assert User.spec.table == "users"
    assert User.spec.per_page == 100
    assert User.spec.hidden == ("password",)
    assert User.spec.casts["created_at"].format == "%d.%m.%Y %H:%M"


def test_subclass_with_bad_cast_fails_on_definition():
    with pytest.raises(ValidationError):

        class Broken(Model):
            table = "broken"
            casts = {"x": "decimal"}


def test_model_without_table_cannot_be_instantiated():
    class Abstract(Model):
        pass

    with pytest.raises(TypeError):
        Abstract(orm=None)  # type: ignore[arg-type]
