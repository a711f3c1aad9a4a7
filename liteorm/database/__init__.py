"""
Schema and seed helpers for the bundled ``users`` table.
"""

from liteorm.database.migrations import migrate, rollback
from liteorm.database.seeds import hash_password, seed_admin, verify_password

__all__ = ["hash_password", "migrate", "rollback", "seed_admin", "verify_password"]
