"""
Seed data and password hashing.

Passwords are stored as ``pbkdf2_sha256$<iterations>$<salt>$<hash>`` with
base64 salt and hash, derived with PBKDF2-HMAC-SHA256.
"""

from __future__ import annotations

import base64
import hmac
import os
from datetime import datetime
from typing import Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from liteorm.database.migrations import USERS_TABLE
from liteorm.errors import StorageFailure
from liteorm.infrastructure.orm import SQLiteORM

PBKDF2_ITERATIONS = 600_000
SALT_BYTES = 16
HASH_PREFIX = "pbkdf2_sha256"

ADMIN_NAME = "Administrator"
ADMIN_EMAIL = "admin@localhost.com"


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def hash_password(password: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    salt = os.urandom(SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return "$".join(
        [
            HASH_PREFIX,
            str(iterations),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(digest).decode("ascii"),
        ]
    )


def verify_password(password: str, encoded: str) -> bool:
    try:
        prefix, iterations, salt, digest = encoded.split("$")
        if prefix != HASH_PREFIX:
            return False
        expected = base64.b64decode(digest)
        actual = _derive(password, base64.b64decode(salt), int(iterations))
    except ValueError:
        return False
    return hmac.compare_digest(actual, expected)


def seed_admin(
    orm: SQLiteORM, password: str, iterations: int = PBKDF2_ITERATIONS
) -> Union[int, bool, StorageFailure]:
    """
    Insert the administrator account.

    Goes through the ORM directly: ``password`` is not fillable on `User`.
    """
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return orm.save(
        USERS_TABLE,
        {
            "name": ADMIN_NAME,
            "email": ADMIN_EMAIL,
            "password": hash_password(password, iterations),
            "created_at": now,
            "updated_at": now,
        },
    )


__all__ = ["ADMIN_EMAIL", "ADMIN_NAME", "hash_password", "seed_admin", "verify_password"]
