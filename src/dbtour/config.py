"""Runtime settings for the tour, read from ``DBTOUR_*`` environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dbtour import flags
from dbtour.db.sqlite_utils import MEMORY

__all__ = ["TourSettings", "load_settings"]

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class TourSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    database: str = MEMORY
    chinook_path: Path | None = None
    chunk_size: int = 10
    log_level: str = "INFO"
    features: dict[str, bool] = Field(default_factory=dict)

    @field_validator("chunk_size")
    def _chunk_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("chunk_size must be >= 1")
        return value

    @field_validator("log_level")
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LEVELS)}")
        return level

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    def feature(self, name: str, *, default: bool = True) -> bool:
        return self.features.get(flags.normalise(name), default)


def load_settings(environ: Mapping[str, str] | None = None, **overrides) -> TourSettings:
    """Build :class:`TourSettings` from ``environ`` (default ``os.environ``)."""

    env = os.environ if environ is None else environ
    values: dict[str, object] = {}
    if env.get("DBTOUR_DATABASE"):
        values["database"] = env["DBTOUR_DATABASE"]
    if env.get("DBTOUR_CHINOOK_PATH"):
        values["chinook_path"] = env["DBTOUR_CHINOOK_PATH"]
    if env.get("DBTOUR_CHUNK_SIZE"):
        values["chunk_size"] = env["DBTOUR_CHUNK_SIZE"]
    if env.get("DBTOUR_LOG_LEVEL"):
        values["log_level"] = env["DBTOUR_LOG_LEVEL"]
    values["features"] = flags.parse_tokens(env.get(flags.ENV_VAR, ""))
    values.update({key: value for key, value in overrides.items() if value is not None})
    return TourSettings(**values)
