"""
Configuration settings for liteorm.

Uses Pydantic Settings to load environment variables for the database file
location per deployment environment, logging, and connection behaviour. Core
classes never read these settings implicitly; callers resolve a `Settings`
instance and hand the resulting path to the connection manager.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DB_FILE_SUFFIX = ".sqlite"

Environment = Literal["development", "testing", "production"]


class Settings(BaseSettings):
    # Application
    app_env: Environment = Field("development", alias="APP_ENV")

    # Database
    db_path: Optional[str] = Field(None, alias="DB_PATH")
    db_dir: str = Field("database", alias="DB_DIR")
    db_name_development: str = Field("app-db-dev", alias="DB_NAME_DEVELOPMENT")
    db_name_testing: str = Field("app-db-test", alias="DB_NAME_TESTING")
    db_name_production: str = Field("app-db-prod", alias="DB_NAME_PRODUCTION")
    db_connect_attempts: int = Field(3, ge=1, alias="DB_CONNECT_ATTEMPTS")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_dir: Optional[str] = Field("storage", alias="LOG_DIR")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    def database_path(self, env: Optional[Environment] = None) -> Path:
        """
        Resolve the database file for an environment (defaults to `app_env`).

        An explicit `DB_PATH` wins over the per-environment names. The SQLite
        suffix is appended when the configured name has none.
        """
        if self.db_path:
            return with_db_suffix(Path(self.db_path))

        names = {
            "development": self.db_name_development,
            "testing": self.db_name_testing,
            "production": self.db_name_production,
        }
        return with_db_suffix(Path(self.db_dir) / names[env or self.app_env])


def with_db_suffix(path: Path) -> Path:
    """Append the SQLite file suffix if `path` has no suffix of its own."""
    if path.suffix:
        return path
    return path.with_suffix(DB_FILE_SUFFIX)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["DB_FILE_SUFFIX", "Environment", "Settings", "get_settings", "with_db_suffix"]
