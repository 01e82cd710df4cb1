"""
Hierarchical configuration for the engine's assumptions.

Sources, highest precedence first:
    1. Environment variables (FINLIT_SECTION__KEY)
    2. Config file (YAML or JSON)
    3. Built-in defaults (``DEFAULTS``)

Env values are read as YAML scalars, so ``FINLIT_MONTE_CARLO__TRIALS=5000``
arrives as the integer 5000 and ``null`` as None.

Usage:
    config = Config(config_file="finlit.yaml")

    config.get("monte_carlo.trials")        # dot-notation access
    config.get("portfolio.weights.sector")
    engine = config.validated()             # typed EngineConfig
"""

import copy
import json
import os
from typing import Any

import yaml
from pydantic import ValidationError

from finlit.core.exceptions import ConfigurationError

_DEFAULT_ENV_PREFIX = "FINLIT_"
_PARSERS = {".yaml": "yaml", ".yml": "yaml", ".json": "json"}

DEFAULTS: dict[str, Any] = {
    "monte_carlo": {
        "trials": 1000,
        "batch_size": 50,
        "stock_mean": 0.10,
        "stock_volatility": 0.20,
        "bond_mean": 0.04,
        "bond_volatility": 0.05,
        "correlation": 0.15,
    },
    "portfolio": {
        "weights": {
            "asset_class": 0.40,
            "geographic": 0.25,
            "sector": 0.25,
            "concentration": 0.10,
        },
        "rebalance_threshold": 5.0,
        "minimum_trade": 100.0,
    },
    "tax": {
        "year": 2025,
        "social_security_wage_base": 176_100,
    },
    "logging": {
        "level": "WARNING",
        "engine_level": None,
        "file": None,
    },
}


def merge(target: dict, source: dict) -> dict:
    """Recursively merge ``source`` into ``target`` in place and return it."""
    for key, value in source.items():
        if isinstance(target.get(key), dict) and isinstance(value, dict):
            merge(target[key], value)
        else:
            target[key] = value
    return target


def _set_path(data: dict, parts: list[str], value: Any) -> None:
    for part in parts[:-1]:
        if not isinstance(data.get(part), dict):
            data[part] = {}
        data = data[part]
    data[parts[-1]] = value


def _parse_env_value(raw: str) -> Any:
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def load_file(path: str) -> dict[str, Any]:
    """Read a YAML or JSON mapping.

    Raises:
        ConfigurationError: Missing file, unknown extension, parse error, or
            a top level that is not a mapping.
    """
    parser = _PARSERS.get(os.path.splitext(path)[1].lower())
    if parser is None:
        raise ConfigurationError(f"Config file {path} must be .yaml, .yml or .json")
    if not os.path.isfile(path):
        raise ConfigurationError(f"Config file {path} does not exist")

    try:
        with open(path) as f:
            data = yaml.safe_load(f) if parser == "yaml" else json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not parse config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


class Config:
    """
    Merged view of defaults, an optional config file, and env overrides.

    Env vars use a double underscore for nesting:
    FINLIT_PORTFOLIO__WEIGHTS__SECTOR=0.3 -> config["portfolio"]["weights"]["sector"] = 0.3
    """

    def __init__(
        self,
        config_file: str | None = None,
        env_prefix: str = _DEFAULT_ENV_PREFIX,
        defaults: dict[str, Any] | None = None,
    ):
        """
        Args:
            config_file: Path to a YAML or JSON file; must exist when given.
            env_prefix: Prefix for environment variable overrides; empty
                disables them.
            defaults: Extra defaults merged over ``DEFAULTS``.
        """
        self.config_file = config_file
        self.env_prefix = env_prefix or ""

        self.config_data = merge(copy.deepcopy(DEFAULTS), copy.deepcopy(defaults or {}))
        if config_file:
            merge(self.config_data, load_file(config_file))
        self._apply_env()

    def _apply_env(self) -> None:
        if not self.env_prefix:
            return
        for env_key, env_value in os.environ.items():
            if env_key.startswith(self.env_prefix):
                parts = env_key[len(self.env_prefix) :].lower().split("__")
                _set_path(self.config_data, parts, _parse_env_value(env_value))

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a config value by dot-notation path.

        Args:
            key_path: e.g. "monte_carlo.trials", "portfolio.weights.sector"
            default: Returned when key is not found.
        """
        current: Any = self.config_data
        for part in key_path.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key_path: str, value: Any) -> None:
        """Set a value by dot-notation path, creating intermediate sections."""
        _set_path(self.config_data, key_path.split("."), value)

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self.config_data)

    def validated(self):
        """Return the config as a typed, validated ``EngineConfig``.

        Raises:
            ConfigurationError: If any section fails schema validation.
        """
        from finlit.core.config_schema import EngineConfig

        try:
            return EngineConfig.model_validate(self.config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


_config_instance: Config | None = None


def get_config(
    config_file: str | None = None,
    env_prefix: str = _DEFAULT_ENV_PREFIX,
) -> Config:
    """Get or create the process-wide Config."""
    global _config_instance
    if _config_instance is None:
        _config_instance = Config(config_file=config_file, env_prefix=env_prefix)
    return _config_instance


def reset_config() -> None:
    global _config_instance
    _config_instance = None
