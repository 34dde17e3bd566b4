"""POSIX launchers (bash scripts, process groups, xdg-open)."""

from __future__ import annotations

import os
import shlex
import signal
import subprocess
from collections.abc import Sequence

from command_dispatcher.launchers.base import ProcessLauncher

FINISHED_MESSAGE = "Process finished. Press Enter to close."


def quote_args(items: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(item)) for item in items)


class PosixLauncher(ProcessLauncher):
    os_name = "posix"
    script_suffix = ".command"
    opener = "xdg-open"

    def open_with_command(self, app: str, items: Sequence[str]) -> list[str]:
        return [self.opener, app, *items]

    def terminal_script(self, target: str, items: Sequence[str], action: str) -> str:
        return (
            "#!/bin/bash\n"
            f"clear; cd {shlex.quote(target)}; set -- {quote_args(items)}; {action}\n"
            "echo\n"
            f'echo "{FINISHED_MESSAGE}"\n'
            "read; clear\n"
        )

    def open_terminal_command(self, script_path: str, items: Sequence[str]) -> list[str]:
        # Items are already baked into the script via `set --`.
        return [self.opener, script_path]

    def shell_command(self, action: str, items: Sequence[str]) -> list[str]:
        return ["bash", "--noprofile", "--norc", "-c", action, "--", *items]

    def _detached_kwargs(self) -> dict:
        return {"start_new_session": True}

    def _captured_kwargs(self) -> dict:
        return {"start_new_session": True}

    def kill_tree(self, process: subprocess.Popen) -> None:
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            # Group already gone; make sure the leader is reaped-able.
            if process.poll() is None:
                process.kill()


class LinuxLauncher(PosixLauncher):
    os_name = "Linux"
