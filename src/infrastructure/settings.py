"""Runtime configuration.

Settings come from HORIZON_* environment variables; command-line flags
override them. GDAL/PROJ options are left to rasterio.Env and the standard
GDAL_* / PROJ_* variables.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

ENV_PREFIX = "HORIZON_"

DEFAULT_DEM_PATH = Path("data/n41w112_30m.tif")


class HorizonSettings(BaseModel):
    """Resolved settings for the horizon CLI (Value Object)."""

    dem_path: Path = DEFAULT_DEM_PATH
    max_bytes: int | None = Field(default=None, gt=0)
    max_workers: int | None = Field(default=None, ge=1)
    log_level: str = "WARNING"

    model_config = ConfigDict(frozen=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "HorizonSettings":
        """Build settings from HORIZON_* variables; unset or empty keeps defaults."""
        env = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for field in ("dem_path", "max_bytes", "max_workers", "log_level"):
            raw = env.get(ENV_PREFIX + field.upper())
            if raw is not None and raw.strip():
                values[field] = raw.strip()
        return cls.model_validate(values)
