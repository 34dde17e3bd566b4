"""macOS launcher using `open`."""

from __future__ import annotations

from collections.abc import Sequence

from command_dispatcher.launchers.posix_launcher import PosixLauncher


class MacOSLauncher(PosixLauncher):
    os_name = "Darwin"
    opener = "open"

    def open_with_command(self, app: str, items: Sequence[str]) -> list[str]:
        return ["open", "-a", app, *items]
