"""Pick the process launcher for the running OS."""

from __future__ import annotations

import platform

from command_dispatcher.launchers.base import ProcessLauncher
from command_dispatcher.launchers.macos_launcher import MacOSLauncher
from command_dispatcher.launchers.posix_launcher import LinuxLauncher, PosixLauncher
from command_dispatcher.launchers.windows_launcher import WindowsLauncher
from utils.system_utils import normalize_os


def get_launcher(os_name: str | None = None) -> ProcessLauncher:
    os_name = normalize_os(os_name or platform.system())
    if os_name == "Darwin":
        return MacOSLauncher()
    if os_name == "Windows":
        return WindowsLauncher()
    if os_name == "Linux":
        return LinuxLauncher()
    return PosixLauncher()
