"""
Model layer for liteorm: the `Model` base class and concrete entities.
"""

from liteorm.models.base import Model
from liteorm.models.user import User

__all__ = ["Model", "User"]
