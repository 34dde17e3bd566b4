"""Open the selected items with an application (fire-and-forget)."""

from __future__ import annotations

import time

from command_dispatcher.actions.base import ActionResult, BaseAction
from command_dispatcher.launchers.base import ProcessLauncher
from command_dispatcher.payload import Instruction
from utils.log_utils import log


class LaunchAction(BaseAction):
    """Handles both ``app`` and ``shortcut``; shortcuts ignore the selection."""

    def __init__(self, launcher: ProcessLauncher, *, shortcut: bool = False) -> None:
        self._launcher = launcher
        self._shortcut = shortcut
        self.action_type = "shortcut" if shortcut else "app"

    def run(self, instruction: Instruction) -> ActionResult:
        start = time.monotonic()
        app = instruction.action.strip()
        if not app:
            log("LAUNCH", "No application given.", "ERROR")
            return self._failed(instruction, "missing app", start)

        items = () if self._shortcut else instruction.items
        argv = self._launcher.open_with_command(app, items)
        try:
            self._launcher.spawn_detached(argv)
        except OSError as exc:
            log("LAUNCH", f"Failed to launch app '{app}': {exc}", "ERROR")
            return self._failed(instruction, str(exc), start, app=app)

        log("LAUNCH", f"Launched app '{app}'")
        return self._ok(instruction, start, app=app, argv=argv)
