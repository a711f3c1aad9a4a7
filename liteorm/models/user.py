"""
User entity.
"""

from __future__ import annotations

from liteorm.models.base import Model


class User(Model):
    table = "users"
    per_page = 100
    fillable = ("name", "email")
    hidden = ("password",)
    casts = {
        "created_at": "datetime:%d.%m.%Y %H:%M",
        "updated_at": "datetime:%d.%m.%Y %H:%M",
    }
    rules = {
        "name": ["required", "string", "min:2", "max:255"],
        "email": ["required", "email", "max:255"],
        "password": ["sometimes", "required", "string", "min:8"],
    }


__all__ = ["User"]
