"""Process launcher interface.

A launcher owns every OS-specific detail of spawning processes: the argv
used to open an application, the terminal script dialect, the shell used
for bounded scripts and how a process tree is killed. Actions only ever
talk to this interface.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

from utils.settings_store import deep_log, is_deep_logging


class ProcessLauncher:
    os_name = "generic"
    script_suffix = ".command"

    # Command construction

    def open_with_command(self, app: str, items: Sequence[str]) -> list[str]:
        raise NotImplementedError

    def terminal_script(self, target: str, items: Sequence[str], action: str) -> str:
        raise NotImplementedError

    def open_terminal_command(self, script_path: str, items: Sequence[str]) -> list[str]:
        raise NotImplementedError

    def shell_command(self, action: str, items: Sequence[str]) -> list[str]:
        raise NotImplementedError

    # Spawning

    def _detached_kwargs(self) -> dict:
        return {}

    def _captured_kwargs(self) -> dict:
        return {}

    def spawn_detached(self, argv: Sequence[str], *, cwd: str | None = None) -> subprocess.Popen:
        """Start a fire-and-forget process with no inherited stdio."""
        if is_deep_logging():
            deep_log(f"[DEEP][LAUNCHER] spawn_detached os={self.os_name} argv={list(argv)}")
        return subprocess.Popen(
            list(argv),
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            **self._detached_kwargs(),
        )

    def spawn_captured(self, argv: Sequence[str], *, cwd: str | None = None) -> subprocess.Popen:
        """Start a process with empty stdin and both output streams piped."""
        if is_deep_logging():
            deep_log(f"[DEEP][LAUNCHER] spawn_captured os={self.os_name} argv={list(argv)}")
        return subprocess.Popen(
            list(argv),
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            **self._captured_kwargs(),
        )

    def kill_tree(self, process: subprocess.Popen) -> None:
        """Force-kill a captured process and its children. Raises OSError on failure."""
        process.kill()
