"""System helpers for environment checks."""

import platform


def current_os() -> str:
    return platform.system().lower()


def normalize_os(value: str | None) -> str:
    """Map loose OS names (mac, win32, gnu/linux, ...) to platform.system() values."""
    text = str(value or "").strip()
    if not text:
        return platform.system()
    lower = text.lower()
    if lower in {"darwin", "mac", "macos", "mac os", "mac os x", "osx"}:
        return "Darwin"
    if lower in {"windows", "win32", "win"}:
        return "Windows"
    if lower in {"linux", "gnu/linux"}:
        return "Linux"
    return text
