"""Find-and-replace in file names (not implemented yet)."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from command_dispatcher.actions.base import ActionResult, BaseAction
from command_dispatcher.payload import Instruction
from utils.log_utils import log

if TYPE_CHECKING:
    from ui.windows import WindowHost


class ReplaceAction(BaseAction):
    action_type = "replace"

    def __init__(self, window_host: WindowHost) -> None:
        self._window_host = window_host

    def run(self, instruction: Instruction) -> ActionResult:
        start = time.monotonic()
        # TODO: define the rename algorithm once the find-and-replace window exists.
        self._window_host.open_find_and_replace(instruction)
        log("REPLACE", f"Find and replace is not implemented ({len(instruction.items)} item(s)).", "WARN")
        return self._result(
            instruction,
            "not_implemented",
            start,
            {"reason": "find and replace not implemented"},
        )
