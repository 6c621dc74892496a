"""
Hierarchical configuration management.

Loads configuration from multiple sources with this precedence (highest wins):
    1. Environment variables (PREFIX_SECTION__KEY)
    2. Config file (YAML or JSON)
    3. Built-in defaults

Usage:
    config = Config(config_file="config/nivesh.yaml")

    config.get("reporting.default_currency")   # dot-notation access
    config.validated().movers.limit             # typed access
"""

import json
import os
from typing import Any

import yaml
from pydantic import ValidationError

from .config_schema import NiveshConfig
from .exceptions import ConfigurationError

_DEFAULT_ENV_PREFIX = "NIVESH_"


def _merge(target: dict, source: dict) -> None:
    """Recursively merge ``source`` into ``target``."""
    for key, value in source.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            _merge(target[key], value)
        else:
            target[key] = value


def _read_file(path: str) -> dict[str, Any]:
    """Parse a YAML or JSON config file; other extensions are rejected."""
    ext = os.path.splitext(path)[1].lower()
    with open(path) as f:
        if ext in (".yaml", ".yml"):
            data = yaml.safe_load(f) or {}
        elif ext == ".json":
            data = json.load(f)
        else:
            raise ConfigurationError(f"Unsupported config format: {path}")
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


class Config:
    """
    Engine settings merged from defaults, a config file, and the environment.

    Env vars use double-underscore to denote nesting:
    NIVESH_REPORTING__DEFAULT_CURRENCY=USD -> config["reporting"]["default_currency"] = "USD"
    """

    def __init__(
        self,
        config_file: str | None = None,
        env_prefix: str = _DEFAULT_ENV_PREFIX,
        defaults: dict[str, Any] | None = None,
    ):
        """
        Args:
            config_file: Path to a YAML or JSON file. Ignored when it does not exist.
            env_prefix: Prefix for environment variable overrides; empty disables them.
            defaults: Extra defaults layered over the built-in ones.
        """
        self.config_file = config_file
        self.env_prefix = env_prefix or ""
        self.config_data: dict[str, Any] = NiveshConfig().model_dump(mode="json")

        if defaults:
            _merge(self.config_data, defaults)
        if config_file and os.path.exists(config_file):
            _merge(self.config_data, _read_file(config_file))
        self._apply_env()

    def _apply_env(self) -> None:
        if not self.env_prefix:
            return
        for env_key, env_value in os.environ.items():
            if not env_key.startswith(self.env_prefix):
                continue
            *parents, leaf = env_key[len(self.env_prefix) :].lower().split("__")
            current = self.config_data
            for part in parents:
                current = current.setdefault(part, {})
            current[leaf] = env_value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a config value by dot-notation path.

        Args:
            key_path: e.g. "reporting.default_currency", "movers.limit"
            default: Returned when key is not found.
        """
        current = self.config_data
        for part in key_path.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key_path: str, value: Any) -> None:
        """Set a config value by dot-notation path, creating intermediate dicts."""
        *parents, leaf = key_path.split(".")
        current = self.config_data
        for part in parents:
            current = current.setdefault(part, {})
        current[leaf] = value

    def validated(self) -> NiveshConfig:
        """Return the merged configuration as a validated ``NiveshConfig``.

        Raises:
            ConfigurationError: If a value fails validation.
        """
        try:
            return NiveshConfig.model_validate(self.config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


# Module-level singleton
_config_instance: Config | None = None


def get_config(config_file: str | None = None, env_prefix: str = _DEFAULT_ENV_PREFIX) -> Config:
    """Get or create the global Config singleton."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config(config_file=config_file, env_prefix=env_prefix)
    return _config_instance


def reset_config() -> None:
    """Reset the global Config singleton (useful for testing)."""
    global _config_instance
    _config_instance = None
