"""Window collaborators used by the dispatcher.

The real windows live in the desktop shell. The dispatcher only needs to ask
for the main window (first run, reopen) and for the find-and-replace surface,
so it depends on the small ``WindowHost`` protocol below. ``ConsoleWindowHost``
is the headless placeholder used by the CLI and the trigger API.
"""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

from utils.log_utils import tprint

if TYPE_CHECKING:
    from command_dispatcher.payload import Instruction


class WindowHost(Protocol):
    def open_main(self) -> None:
        ...

    def open_find_and_replace(self, instruction: Instruction) -> None:
        ...


class ConsoleWindowHost:
    def __init__(self) -> None:
        self.main_open = False
        self.find_and_replace_requests: list[Instruction] = []

    def open_main(self) -> None:
        if self.main_open:
            tprint("[UI] Showing main window.")
            return
        self.main_open = True
        tprint("[UI] Creating main window (attach your frontend here).")

    def open_find_and_replace(self, instruction: Instruction) -> None:
        self.find_and_replace_requests.append(instruction)
        tprint(f"[UI] Creating find and replace window for {len(instruction.items)} item(s).")

    def close(self) -> None:
        self.main_open = False
        tprint("[UI] Main window closed")
