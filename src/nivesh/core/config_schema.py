"""Pydantic models for config validation.

Opt-in schema validation for ``Config.config_data``.  Call
``Config.validated()`` to obtain a typed, validated ``NiveshConfig``
instance.  Existing dict-based access continues to work unchanged.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_CURRENCY = "CAD"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
CASH_COLOR = "#6b7280"
ALLOCATION_PALETTE = [
    "#3b82f6",  # blue
    "#22c55e",  # green
    "#f97316",  # orange
    "#8b5cf6",  # purple
    "#ec4899",  # pink
    "#14b8a6",  # teal
    "#eab308",  # yellow
    "#ef4444",  # red
]


class ReportingConfig(BaseModel):
    """Reporting-currency settings."""

    default_currency: str = DEFAULT_CURRENCY

    @field_validator("default_currency", mode="before")
    @classmethod
    def _currency_code(cls, v: Any) -> Any:
        if isinstance(v, str):
            code = v.strip().upper()
            if len(code) != 3 or not code.isascii() or not code.isalpha():
                raise ValueError(f"invalid currency code: {v!r}")
            return code
        return v


class AllocationConfig(BaseModel):
    """Colors used by the allocation breakdown."""

    cash_color: str = CASH_COLOR
    palette: list[str] = list(ALLOCATION_PALETTE)

    @field_validator("palette")
    @classmethod
    def _non_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("allocation palette cannot be empty")
        return v


class MoversConfig(BaseModel):
    """Top-movers report settings."""

    limit: int = 10


class LoggingConfig(BaseModel):
    """Loguru sink settings."""

    level: str = "WARNING"
    file: str | None = None

    @field_validator("file", mode="before")
    @classmethod
    def _expand_user(cls, v: Any) -> Any:
        if isinstance(v, str) and v:
            return os.path.expanduser(v)
        return v or None

    @field_validator("level", mode="before")
    @classmethod
    def _known_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            level = v.strip().upper()
            if level not in LOG_LEVELS:
                raise ValueError(f"unknown log level: {v!r}")
            return level
        return v


class NiveshConfig(BaseModel):
    """Root configuration model.

    Uses ``extra="allow"`` so consumers can bolt on custom sections
    without touching this schema.
    """

    model_config = ConfigDict(extra="allow")

    reporting: ReportingConfig = ReportingConfig()
    allocation: AllocationConfig = AllocationConfig()
    movers: MoversConfig = MoversConfig()
    logging: LoggingConfig = LoggingConfig()
