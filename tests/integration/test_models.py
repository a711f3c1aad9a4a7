"""
Integration tests for models, migrations and seeds.
"""

from __future__ import annotations

import re

import pytest

from liteorm.database import hash_password, migrate, rollback, seed_admin, verify_password
from liteorm.database.seeds import ADMIN_EMAIL, ADMIN_NAME
from liteorm.errors import NotFound, StorageFailure
from liteorm.infrastructure import SQLiteORM
from liteorm.models import Model, User
from scripts import generate_users

FAST_ITERATIONS = 1_000
DISPLAY_FORMAT = re.compile(r"^\d{2}\.\d{2}\.\d{4} \d{2}:\d{2}$")


class Item(Model):
    table = "items"
    per_page = 2
    fillable = ("name", "qty", "price")
    hidden = ("payload",)
    casts = {"qty": "string", "price": "int", "payload": "string"}


@pytest.fixture
def item_model(orm: SQLiteORM, items_table: str) -> Item:
    return Item(orm)


def _add_users(orm: SQLiteORM, count: int) -> None:
    password = hash_password("secret-password", FAST_ITERATIONS)
    payloads = [
        {"name": f"User {i}", "email": f"user{i}@example.com", "password": password}
        for i in range(count)
    ]
    assert orm.save_bulk("users", payloads) is True


class TestShaping:
    def test_fill_keeps_fillable_columns_only(self, user_model: User):
        payload = {"name": "A", "email": "a@x.com", "password": "x", "is_admin": 1}
        assert user_model.fill(payload) == {"name": "A", "email": "a@x.com"}

    def test_reads_are_cast_and_hidden(self, item_model: Item):
        new_id = item_model.save({"name": "widget", "qty": 5, "price": 9.75, "payload": b"raw"})

        record = item_model.fetch(new_id)

        assert record == {"id": new_id, "name": "widget", "qty": "5", "price": 9}
        assert "payload" not in record

    def test_writes_drop_non_fillable_columns(self, orm: SQLiteORM, item_model: Item):
        new_id = item_model.save({"name": "widget", "payload": b"raw"})
        assert orm.fetch("items", new_id)["payload"] is None

    def test_null_columns_stay_null(self, item_model: Item):
        new_id = item_model.save({"name": "bare"})
        record = item_model.fetch(new_id)
        assert record["qty"] is None
        assert record["price"] is None

    def test_all_and_find(self, item_model: Item):
        item_model.save_bulk([{"name": "a", "qty": 1, "payload": b"x"}, {"name": "b", "qty": 2, "payload": b"y"}])

        assert [record["qty"] for record in item_model.all()] == ["1", "2"]
        assert item_model.find([("name", "b")])["qty"] == "2"
        assert isinstance(item_model.find([("name", "zzz")]), NotFound)

    def test_paginate_uses_model_page_size(self, item_model: Item):
        item_model.save_bulk([{"name": f"n{i}"} for i in range(5)])

        page = item_model.paginate()

        assert page["per_page"] == 2
        assert page["total"] == 5
        assert [record["name"] for record in page["data"]] == ["n0", "n1"]
        assert item_model.paginate(3, 4)["data"] == []

    def test_paginate_rejects_zero_page_size(self, item_model: Item):
        item_model.save({"name": "only"})

        assert isinstance(item_model.paginate(1, 0), StorageFailure)

    def test_cast_columns_are_still_hidden(self, orm: SQLiteORM, item_model: Item):
        new_id = orm.save("items", {"name": "secret", "payload": b"raw"})

        assert item_model.present({"payload": b"raw", "name": "x"}) == {"name": "x"}
        assert "payload" not in item_model.fetch(new_id)
        assert "payload" not in item_model.find([("name", "secret")])
        assert all("payload" not in record for record in item_model.all())
        assert all("payload" not in record for record in item_model.paginate()["data"])

    def test_update_and_bulk_operations(self, orm: SQLiteORM, item_model: Item):
        item_model.save_bulk([{"name": f"n{i}", "qty": i} for i in range(4)])

        assert item_model.update(1, {"qty": 10, "payload": b"ignored"}) is True
        assert orm.fetch("items", 1)["payload"] is None
        assert item_model.update_bulk([2, 3], {"price": 1.5}) is True
        assert item_model.count({"price": 1.5}) == 2
        assert item_model.delete(4) is True
        assert item_model.delete_bulk([1, 2]) is True
        assert item_model.count() == 1

    def test_failures_pass_through(self, orm: SQLiteORM):
        class Ghost(Model):
            table = "ghosts"

        ghost = Ghost(orm)
        assert isinstance(ghost.all(), StorageFailure)
        assert isinstance(ghost.fetch(1), StorageFailure)
        assert isinstance(ghost.paginate(), StorageFailure)
        assert ghost.get_columns() == []


class TestUsers:
    def test_seeded_admin_is_presented_without_password(self, orm: SQLiteORM, user_model: User):
        new_id = seed_admin(orm, "correct horse battery", FAST_ITERATIONS)
        assert new_id == 1

        record = user_model.fetch(new_id)

        assert record["name"] == ADMIN_NAME
        assert record["email"] == ADMIN_EMAIL
        assert "password" not in record
        assert DISPLAY_FORMAT.match(record["created_at"])
        assert DISPLAY_FORMAT.match(record["updated_at"])
        assert verify_password("correct horse battery", orm.fetch("users", new_id)["password"])

    def test_user_save_cannot_set_password(self, user_model: User):
        result = user_model.save({"name": "A", "email": "a@x.com", "password": "secret-password"})

        assert isinstance(result, StorageFailure)
        assert user_model.count() == 0

    def test_update_keeps_password(self, orm: SQLiteORM, user_model: User):
        seed_admin(orm, "original-password", FAST_ITERATIONS)

        assert user_model.update(1, {"name": "Root", "password": "hijacked"}) is True

        raw = orm.fetch("users", 1)
        assert raw["name"] == "Root"
        assert verify_password("original-password", raw["password"])

    def test_paginate_defaults_to_user_page_size(self, orm: SQLiteORM, user_model: User):
        _add_users(orm, 3)

        page = user_model.paginate()

        assert page["per_page"] == 100
        assert page["total"] == 3
        assert all("password" not in record for record in page["data"])

    def test_validate_with_model_rules(self, user_model: User):
        assert user_model.validate({"name": "A", "email": "bad"}) == {
            "name": ["min:2"],
            "email": ["email"],
        }
        assert user_model.validate({"name": "Ann", "email": "ann@example.com"}) == {}
        assert user_model.validate({"name": "Ann", "email": "ann@example.com", "password": "short"}) == {
            "password": ["min:8"]
        }

    def test_validate_with_explicit_rules(self, user_model: User):
        assert user_model.validate({"age": "x"}, {"age": ["integer"]}) == {"age": ["integer"]}


class TestMigrations:
    def test_migrate_is_idempotent(self, orm: SQLiteORM, users_table: str):
        assert migrate(orm) is True
        assert orm.get_columns(users_table) == [
            "id",
            "name",
            "email",
            "password",
            "created_at",
            "updated_at",
        ]

    def test_email_is_unique(self, orm: SQLiteORM, users_table: str):
        payload = {"name": "A", "email": "dup@example.com", "password": "x"}
        assert orm.save(users_table, payload) == 1
        assert isinstance(orm.save(users_table, payload), StorageFailure)

    def test_trigger_refreshes_updated_at(self, orm: SQLiteORM, users_table: str):
        orm.save(users_table, {"name": "A", "email": "a@example.com", "password": "x"})
        orm.update(users_table, 1, {"updated_at": "2000-01-01 00:00:00"})
        assert orm.fetch(users_table, 1)["updated_at"] == "2000-01-01 00:00:00"

        orm.update(users_table, 1, {"name": "B"})

        assert orm.fetch(users_table, 1)["updated_at"] != "2000-01-01 00:00:00"

    def test_rollback_drops_table(self, orm: SQLiteORM, users_table: str):
        assert rollback(orm) is True
        assert orm.table_exists(users_table) is False
        assert rollback(orm) is True


class TestPasswords:
    def test_hash_and_verify(self):
        encoded = hash_password("s3cret", FAST_ITERATIONS)

        assert encoded.startswith(f"pbkdf2_sha256${FAST_ITERATIONS}$")
        assert verify_password("s3cret", encoded)
        assert not verify_password("wrong", encoded)

    def test_hashes_are_salted(self):
        assert hash_password("same", FAST_ITERATIONS) != hash_password("same", FAST_ITERATIONS)

    @pytest.mark.parametrize("encoded", ["garbage", "md5$1$abc$def", "pbkdf2_sha256$many$abc$def"])
    def test_malformed_hashes_never_verify(self, encoded: str):
        assert verify_password("anything", encoded) is False


class TestGeneratedUsers:
    def test_load_into_db_in_batches(self, orm: SQLiteORM, users_table: str):
        users = generate_users._generate_users(5, seed=7, iterations=10)

        assert generate_users._load_into_db(orm, users, batch_size=2) == 5
        assert orm.count(users_table) == 5

    def test_load_stops_at_first_failed_batch(self, orm: SQLiteORM, users_table: str):
        users = generate_users._generate_users(4, seed=7, iterations=10)
        users[3]["email"] = users[0]["email"]

        assert generate_users._load_into_db(orm, users, batch_size=2) == 2
        assert orm.count(users_table) == 2
