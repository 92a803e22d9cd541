import logging
import os
import sys
from enum import Enum
from typing import Any, List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-8s] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stdout,
)


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"


class Settings(BaseSettings):
    LOG_LEVEL: int = logging.INFO
    LOG_FORMAT: LogFormat = LogFormat.JSON
    DATABASE_URL: str
    UNIT_TEST_DATABASE_URL: str | None = None  # Optional, for unit tests
    CREATE_TABLES_ON_STARTUP: bool = False

    # JWT settings (tokens are issued elsewhere, we only verify them)
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"

    # Comma-separated role names allowed to run administrative operations
    ADMIN_ROLES: str = "ADMIN"

    IMPORT_RATE_LIMIT: str = "30/minute"

    @field_validator("LOG_FORMAT", mode="before")
    @classmethod
    def parse_log_format(cls, v: str | LogFormat) -> LogFormat:
        if isinstance(v, LogFormat):
            return v
        if isinstance(v, str):
            try:
                return LogFormat(v.strip().lower())
            except ValueError:
                raise ValueError(f"Invalid LOG_FORMAT: {v}")
        raise ValueError(f"LOG_FORMAT must be a string or LogFormat, got {type(v)}")

    @field_validator("ADMIN_ROLES")
    @classmethod
    def check_admin_roles(cls, v: str) -> str:
        if not [role for role in v.split(",") if role.strip()]:
            raise ValueError("ADMIN_ROLES must name at least one role")
        return v

    def get_admin_roles(self) -> List[str]:
        """Admin role names, upper-cased to match resolved token roles."""
        return [role.strip().upper() for role in self.ADMIN_ROLES.split(",") if role.strip()]

    def get_active_database_url(self) -> str:
        """
        Returns the correct database URL for the current context.
        - If running under pytest (unit test) and UNIT_TEST_DATABASE_URL is set, use it.
        - Otherwise, use DATABASE_URL.
        """
        if os.environ.get("PYTEST_CURRENT_TEST") and self.UNIT_TEST_DATABASE_URL:
            return self.UNIT_TEST_DATABASE_URL
        return self.DATABASE_URL

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def parse_log_level(cls, v: Any) -> int:
        if isinstance(v, int):
            return v
        if isinstance(v, str):
            # Accepts 'INFO', 'DEBUG', etc. (case-insensitive)
            level = logging.getLevelName(v.upper())
            if isinstance(level, int):
                return level
            raise ValueError(f"Invalid log level: {v}")
        raise ValueError(f"LOG_LEVEL must be int or str, got {type(v)}")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="forbid"
    )


def get_settings() -> Settings:
    """
    Returns a fresh Settings instance, reading environment variables at call time.
    Tests can patch os.environ or use monkeypatch before calling get_settings().
    """
    return Settings()  # type: ignore[call-arg]
