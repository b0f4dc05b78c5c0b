"""Centralized library configuration using Pydantic Settings (v2).

This module exposes a cached `Settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the working directory: .env, .env.local, .env.dev/.env.test/.env.prod

Every knob lives under the `IODINE_` prefix so a host application's own
variables (a bare `LOG_LEVEL`, say) are never parsed here. Importing or using
the library must not fail because of configuration: invalid values are logged
and the defaults are used instead.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Typed library configuration loaded from env and `.env` files.

    Attributes
    ----------
    log_level : LogLevelName
        Log level for the `iodine` loggers; maps from `IODINE_LOG_LEVEL`.
        Case-insensitive.
    host : Optional[str]
        Host name recorded in stack entries instead of the resolved one.
        Maps from `IODINE_HOST`. Useful inside containers with random names.
    json_indent : Optional[int]
        Indent passed to the JSON encoder by `emit_json`; maps from
        `IODINE_JSON_INDENT`. `None` produces compact output.
    """

    log_level: LogLevelName = Field(default="INFO", alias="IODINE_LOG_LEVEL")
    host: str | None = Field(default=None, alias="IODINE_HOST")
    json_indent: int | None = Field(default=None, ge=0, alias="IODINE_JSON_INDENT")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v: Any) -> Any:
        """Accept `debug`, `Info`, ... as well as the canonical names."""
        return v.strip().upper() if isinstance(v, str) else v

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance, falling back to defaults.

    Tests force a rebuild via `load_settings.cache_clear()` after mutating
    `os.environ`.
    """
    try:
        return Settings()
    except ValidationError as exc:
        logging.getLogger("iodine.settings").warning(
            "Ignoring invalid iodine settings, using defaults: %s", exc
        )
        return Settings.model_construct()


def get_logger(name: str = "iodine") -> logging.Logger:
    """Return a logger configured to the current `log_level` setting."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger


__all__ = ["Settings", "load_settings", "get_logger"]
