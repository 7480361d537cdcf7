"""Locate the DevMind home directory and read/write its configuration file."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .models import GlobalConfig

HOME_ENV_VAR = "DEVMIND_HOME"
GLOBAL_CONFIG_FILENAME = "config.yaml"
YAML_SUFFIXES = (".yaml", ".yml")


def resolve_home(default: Path | None = None) -> Path:
    """``$DEVMIND_HOME`` when set, else ``default``, else the checkout root."""

    env_root = os.environ.get(HOME_ENV_VAR)
    if env_root:
        return Path(env_root).expanduser().resolve()
    return (default or Path(__file__).resolve().parents[2]).resolve()


def _load_mapping(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as stream:
        data = yaml.safe_load(stream) if path.suffix in YAML_SUFFIXES else json.load(stream)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must hold a mapping, not {type(data).__name__}")
    return data


def _dump_mapping(path: Path, payload: dict) -> None:
    tmp_path = path.with_name(path.name + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as stream:
        if path.suffix in YAML_SUFFIXES:
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)
    tmp_path.replace(path)


@dataclass(slots=True)
class ConfigLocator:
    """Directories under the DevMind home: ``data/`` and ``logs/``."""

    project_root: Path | None = None
    data_dir: Path = field(init=False)
    logs_dir: Path = field(init=False)

    def __post_init__(self) -> None:
        self.project_root = resolve_home(self.project_root)
        self.data_dir = self.project_root / "data"
        self.logs_dir = self.project_root / "logs"
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def global_config_path(self) -> Path:
        return self.data_dir / GLOBAL_CONFIG_FILENAME


class ConfigRepository:
    """Cached access to the ``GlobalConfig`` document.

    The first load of a home without a config file writes one with defaults so
    users have something to edit.
    """

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cached: GlobalConfig | None = None

    @property
    def path(self) -> Path:
        return self.locator.global_config_path()

    def load_global_config(self) -> GlobalConfig:
        if self._cached is None:
            if self.path.exists():
                self._cached = GlobalConfig.model_validate(_load_mapping(self.path))
            else:
                self.save_global_config(GlobalConfig())
        return self._cached

    def save_global_config(self, config: GlobalConfig) -> None:
        _dump_mapping(self.path, config.model_dump(mode="json"))
        self._cached = config

    def reload(self) -> GlobalConfig:
        self._cached = None
        return self.load_global_config()

    def storage_path(self) -> Path:
        """Absolute location of the catalog store."""

        return self.load_global_config().storage.resolved_path(self.locator.project_root)


__all__ = ["ConfigLocator", "ConfigRepository", "HOME_ENV_VAR", "resolve_home"]
