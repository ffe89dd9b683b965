"""Locations demokit keeps between runs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var

APP_DIR_NAME: Final[str] = "demokit"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    cache_dir: Path

    def http_cache_path(self) -> Path:
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        return self.cache_dir / HTTP_CACHE_FILENAME


def _platform_cache_root() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_CACHE_HOME")
    return Path(xdg) if xdg else Path.home() / ".cache"


def get_storage_config() -> StorageConfig:
    override = optional_env_var("DEMOKIT_CACHE_DIR")
    cache_dir = Path(override) if override else _platform_cache_root() / APP_DIR_NAME
    return StorageConfig(cache_dir=cache_dir.expanduser().resolve())


def get_http_cache_path(*, storage: StorageConfig | None = None) -> Path:
    return (storage or get_storage_config()).http_cache_path()
