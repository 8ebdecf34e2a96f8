"""Configuration loading helpers for daily-feeds."""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .models import FeedsConfig

CONFIG_EXTENSIONS = (".toml", ".yaml", ".yml", ".json")
CONFIG_ENV_VAR = "DAILY_FEEDS_CONFIG"
DEFAULT_CONFIG_FILENAME = "config.toml"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".toml":
        data = tomllib.loads(text)
    elif path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


@dataclass(slots=True)
class ConfigLocator:
    """Resolve which configuration file a run should use."""

    explicit: Path | None = None

    def config_path(self) -> Path:
        if self.explicit is not None:
            return self.explicit.expanduser().resolve()
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path).expanduser().resolve()
        return (Path.cwd() / DEFAULT_CONFIG_FILENAME).resolve()


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: FeedsConfig | None = None

    @property
    def path(self) -> Path:
        return self.locator.config_path()

    def load(self) -> FeedsConfig:
        if self._cache is not None:
            return self._cache
        path = self.path
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")
        if path.suffix not in CONFIG_EXTENSIONS:
            raise ConfigError(f"Unsupported configuration format: {path.suffix}")
        try:
            payload = _read_file(path)
        except (OSError, ValueError, tomllib.TOMLDecodeError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot read configuration {path}: {exc}") from exc
        try:
            config = FeedsConfig.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration {path}: {exc}") from exc
        self._cache = config.resolve_paths(path.parent)
        return self._cache

    def reload(self) -> FeedsConfig:
        """Drop the cached config and read the file again."""

        self._cache = None
        return self.load()


__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_EXTENSIONS",
    "ConfigLocator",
    "ConfigRepository",
]
