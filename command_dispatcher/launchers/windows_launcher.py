"""Windows launcher using cmd.exe and ShellExecute-style `start`."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

from command_dispatcher.launchers.base import ProcessLauncher

FINISHED_MESSAGE = "Process finished. Press Enter to close."


class WindowsLauncher(ProcessLauncher):
    os_name = "Windows"
    script_suffix = ".bat"

    def open_with_command(self, app: str, items: Sequence[str]) -> list[str]:
        return ["cmd", "/C", "start", "", app, *items]

    def terminal_script(self, target: str, items: Sequence[str], action: str) -> str:
        # Items arrive as %1..%n through open_terminal_command.
        return (
            "@echo off\r\n"
            f'cls & cd /d "{target}" & {action}\r\n'
            f"echo {FINISHED_MESSAGE}\r\n"
            "pause >nul & cls\r\n"
        )

    def open_terminal_command(self, script_path: str, items: Sequence[str]) -> list[str]:
        return ["cmd", "/C", "start", "", "cmd", "/K", script_path, *items]

    def shell_command(self, action: str, items: Sequence[str]) -> list[str]:
        return ["cmd", "/C", action, *items]

    def _detached_kwargs(self) -> dict:
        return {"creationflags": getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)}

    def _captured_kwargs(self) -> dict:
        return {"creationflags": getattr(subprocess, "CREATE_NO_WINDOW", 0)}

    def kill_tree(self, process: subprocess.Popen) -> None:
        completed = subprocess.run(
            ["taskkill", "/PID", str(process.pid), "/T", "/F"],
            check=False,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        if completed.returncode != 0 and process.poll() is None:
            process.kill()
