"""In-memory cache for app settings."""

from __future__ import annotations

import os
import threading
from typing import Any

from utils.file_utils import load_json
from utils.log_utils import tprint

DEFAULT_SETTINGS_PATH = "config/app_settings.json"

_lock = threading.Lock()
_settings_cache: dict[str, Any] = {}


def settings_path() -> str:
    return os.getenv("TOOLY_SETTINGS_PATH", DEFAULT_SETTINGS_PATH)


def refresh_settings() -> dict[str, Any]:
    """Reload settings from disk and replace the cache."""
    try:
        data = load_json(settings_path())
    except (OSError, ValueError) as exc:
        tprint(f"[SETTINGS][WARN] Failed to read {settings_path()}: {exc}")
        data = {}
    if not isinstance(data, dict):
        data = {}
    with _lock:
        _settings_cache.clear()
        _settings_cache.update(data)
        return dict(_settings_cache)


def get_settings() -> dict[str, Any]:
    """Return a copy of the cached settings."""
    with _lock:
        cached = dict(_settings_cache)
    if not cached:
        return refresh_settings()
    return cached


def is_deep_logging() -> bool:
    """Return True when log_level requests deep tracing."""
    level = str(get_settings().get("log_level", "")).upper()
    return level in {"DEEP"}


def deep_log(message: str) -> None:
    if is_deep_logging():
        tprint(message)
