"""Run a command in an interactive terminal window.

The command is wrapped in a generated script (cd into the target, set the
selected items as positional arguments, run, wait for Enter) and the script
is handed to the OS terminal. The user drives the session, so no timeout is
applied here.

Scripts are left on disk for the terminal to read; ones older than a day
are removed the next time a terminal script is written.
"""

from __future__ import annotations

import os
import tempfile
import time
from pathlib import Path

from command_dispatcher.actions.base import ActionResult, BaseAction
from command_dispatcher.launchers.base import ProcessLauncher
from command_dispatcher.payload import Instruction
from utils.log_utils import log

SCRIPT_PREFIX = "tooly-"
STALE_SCRIPT_SECS = 24 * 60 * 60


class TerminalAction(BaseAction):
    action_type = "terminal"

    def __init__(self, launcher: ProcessLauncher, *, script_dir: str | Path | None = None) -> None:
        self._launcher = launcher
        self._script_dir = script_dir

    def remove_stale_scripts(self, max_age: float = STALE_SCRIPT_SECS) -> int:
        directory = Path(self._script_dir or tempfile.gettempdir())
        cutoff = time.time() - max_age
        removed = 0
        for path in directory.glob(f"{SCRIPT_PREFIX}*{self._launcher.script_suffix}"):
            try:
                if path.stat().st_mtime < cutoff:
                    path.unlink()
                    removed += 1
            except OSError as exc:
                log("TERMINAL", f"Could not remove old script '{path}': {exc}", "WARN")
        return removed

    def write_script(self, instruction: Instruction) -> Path:
        """Materialize the terminal script to a fresh temp file and make it executable."""
        content = self._launcher.terminal_script(
            instruction.target, instruction.items, instruction.action
        )
        fd, name = tempfile.mkstemp(
            prefix=SCRIPT_PREFIX,
            suffix=self._launcher.script_suffix,
            dir=self._script_dir,
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        os.chmod(name, 0o755)
        return Path(name)

    def run(self, instruction: Instruction) -> ActionResult:
        start = time.monotonic()
        if not Path(instruction.target).is_dir():
            log("TERMINAL", f"Target directory '{instruction.target}' does not exist.", "ERROR")
            return self._failed(instruction, "target is not a directory", start)

        self.remove_stale_scripts()
        try:
            script_path = self.write_script(instruction)
        except OSError as exc:
            log("TERMINAL", f"Failed to write terminal script: {exc}", "ERROR")
            return self._failed(instruction, str(exc), start)

        argv = self._launcher.open_terminal_command(str(script_path), instruction.items)
        try:
            self._launcher.spawn_detached(argv)
        except OSError as exc:
            log("TERMINAL", f"Failed to open terminal for '{script_path}': {exc}", "ERROR")
            return self._failed(instruction, str(exc), start, script=str(script_path))

        log("TERMINAL", f"Opened terminal script '{script_path}' in '{instruction.target}'.")
        return self._ok(instruction, start, script=str(script_path))
