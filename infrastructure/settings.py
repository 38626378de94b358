"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

from dataclasses import dataclass
import json
import os
from pathlib import Path
from typing import Any

from loguru import logger


DEFAULT_FILES_DIR = Path.home() / ".local" / "share" / "snaplog"
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "snaplog"
DEFAULT_INTERVAL_MS = 2000
DEFAULT_JPEG_QUALITY = 100


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access.

    A missing file yields empty settings so every key falls back to its default.
    """

    def __init__(self, settings_path: str | Path | None = None) -> None:
        self._path = Path(settings_path) if settings_path else None
        self._data: dict[str, Any] = {}
        if self._path is None:
            return
        if not self._path.exists():
            logger.info("settings.json not found, using defaults: {}", self._path)
            return
        with self._path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"settings root must be an object: {self._path}")
        self._data = data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JsonSettings:
        inst = cls()
        inst._data = dict(data)
        return inst

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node


@dataclass(frozen=True)
class AppConfig:
    """Typed view of the settings the application uses."""

    files_dir: Path
    cache_dir: Path
    log_dir: Path
    jpeg_quality: int = DEFAULT_JPEG_QUALITY
    interval_ms: int = DEFAULT_INTERVAL_MS
    log_level: str = "INFO"


def _expand(raw: Any, default: Path) -> Path:
    if not isinstance(raw, str) or not raw.strip():
        return default
    return Path(os.path.expanduser(os.path.expandvars(raw)))


def _positive_int(settings: JsonSettings, key: str, default: int) -> int:
    raw = settings.get(key, default)
    try:
        value = int(raw)
    except (ValueError, TypeError):
        logger.warning("Invalid {}={!r}, using {}", key, raw, default)
        return default
    if value <= 0:
        logger.warning("Invalid {}={!r}, using {}", key, raw, default)
        return default
    return value


def load_app_config(settings: JsonSettings) -> AppConfig:
    """Build `AppConfig` from `settings`, falling back to defaults per key."""
    files_dir = _expand(settings.get("paths.files_dir"), DEFAULT_FILES_DIR)
    cache_dir = _expand(settings.get("paths.cache_dir"), DEFAULT_CACHE_DIR)
    log_dir = _expand(settings.get("paths.log_dir"), files_dir / "logs")

    quality = _positive_int(settings, "capture.jpeg_quality", DEFAULT_JPEG_QUALITY)
    level = settings.get("logging.level", "INFO")
    if not isinstance(level, str) or not level.strip():
        level = "INFO"

    return AppConfig(
        files_dir=files_dir,
        cache_dir=cache_dir,
        log_dir=log_dir,
        jpeg_quality=min(100, quality),
        interval_ms=_positive_int(settings, "location.interval_ms", DEFAULT_INTERVAL_MS),
        log_level=level.strip().upper(),
    )
