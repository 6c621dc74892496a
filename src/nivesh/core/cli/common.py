"""Shared setup logic for CLI commands."""

from __future__ import annotations

import dataclasses
import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import click

from nivesh.core.config import Config
from nivesh.core.exceptions import NiveshError


def init_app(config_file: str | None, log_level: str | None) -> Config:
    """Load config and configure logging from it."""
    from nivesh.core.utils.logging import setup_logging_from_config

    config = Config(config_file=config_file)
    if log_level:
        config.set("logging.level", log_level)
    try:
        setup_logging_from_config(config)
    except NiveshError as e:
        raise click.ClickException(str(e)) from e
    return config


def load_service(snapshot: str, config: Config):
    """Build a PortfolioService over a snapshot file, exiting cleanly on bad input."""
    from nivesh.portfolio import InMemoryPortfolioStore, PortfolioService

    try:
        store = InMemoryPortfolioStore.from_file(snapshot)
        return PortfolioService(store, config=config)
    except NiveshError as e:
        raise click.ClickException(str(e)) from e


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Cannot serialize {type(value).__name__}")


def to_json(value: Any) -> str:
    """Serialize dataclass results; Decimals are written as strings to keep precision."""
    if dataclasses.is_dataclass(value):
        value = dataclasses.asdict(value)
    elif isinstance(value, list):
        value = [dataclasses.asdict(v) if dataclasses.is_dataclass(v) else v for v in value]
    return json.dumps(value, indent=2, default=_json_default)


def fmt_money(amount: Decimal | None, currency: str = "") -> str:
    if amount is None:
        return "n/a"
    text = f"{amount:,.2f}"
    return f"{text} {currency}".strip()


def fmt_percent(value: float | None) -> str:
    if value is None:
        return "n/a"
    return f"{value:+.2f}%"
