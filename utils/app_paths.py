"""Application data directory and first-run marker."""

from __future__ import annotations

import os
from pathlib import Path

from utils.file_utils import save_json
from utils.system_utils import current_os

APP_IDENTIFIER = "com.tooly.app"
MARKER_FILE = "config.json"


def app_data_dir(os_name: str | None = None) -> Path:
    """Return the per-user data directory, honouring TOOLY_DATA_DIR."""
    override = os.getenv("TOOLY_DATA_DIR")
    if override:
        return Path(override).expanduser()

    os_name = (os_name or current_os()).lower()
    home = Path.home()
    if os_name == "darwin":
        return home / "Library" / "Application Support" / APP_IDENTIFIER
    if os_name.startswith("windows"):
        base = os.getenv("APPDATA")
        return (Path(base) if base else home / "AppData" / "Roaming") / APP_IDENTIFIER
    base = os.getenv("XDG_DATA_HOME")
    return (Path(base) if base else home / ".local" / "share") / APP_IDENTIFIER


def is_first_run(data_dir: str | Path | None = None) -> bool:
    """Return True (and drop the marker) when no config.json exists yet."""
    directory = Path(data_dir) if data_dir is not None else app_data_dir()
    marker = directory / MARKER_FILE
    if marker.exists():
        return False
    save_json(marker, {})
    return True
