"""Route trigger URLs to action handlers."""

from __future__ import annotations

import time
from collections.abc import Callable

from command_dispatcher.actions.base import ActionResult
from command_dispatcher.actions.create import CreateAction
from command_dispatcher.actions.launch import LaunchAction
from command_dispatcher.actions.replace import ReplaceAction
from command_dispatcher.actions.script import BoundedScriptRunner
from command_dispatcher.actions.terminal import TerminalAction
from command_dispatcher.launchers.base import ProcessLauncher
from command_dispatcher.launchers.router import get_launcher
from command_dispatcher.payload import (
    Instruction,
    PayloadError,
    decode_payload,
    load_instruction,
    split_trigger,
)
from ui.windows import ConsoleWindowHost, WindowHost
from utils.log_utils import log
from utils.settings_store import deep_log, is_deep_logging

RUN_COMMAND = "run"

Handler = Callable[[Instruction], ActionResult]


class Dispatcher:
    """Decode triggers and run exactly one action per trigger.

    Every failure ends up as a logged ``ActionResult``; nothing raised by a
    handler reaches the caller.
    """

    def __init__(
        self,
        *,
        window_host: WindowHost | None = None,
        launcher: ProcessLauncher | None = None,
        runner: BoundedScriptRunner | None = None,
        script_dir: str | None = None,
    ) -> None:
        self.window_host = window_host or ConsoleWindowHost()
        self.launcher = launcher or get_launcher()
        self.runner = runner or BoundedScriptRunner(self.launcher)
        self._handlers: dict[str, Handler] = {
            "create": CreateAction().run,
            "app": LaunchAction(self.launcher).run,
            "shortcut": LaunchAction(self.launcher, shortcut=True).run,
            "terminal": TerminalAction(self.launcher, script_dir=script_dir).run,
            "script": self.runner.run,
            "replace": ReplaceAction(self.window_host).run,
        }

    @property
    def action_types(self) -> list[str]:
        return list(self._handlers)

    def dispatch_url(self, url: str) -> ActionResult:
        start = time.monotonic()
        try:
            trigger = split_trigger(url)
        except PayloadError as exc:
            log("DISPATCH", f"Failed to decode url: {exc}", "ERROR")
            return _bare_result("invalid", start, reason=str(exc))

        if trigger.command != RUN_COMMAND:
            log("DISPATCH", f"Unknown command: {trigger.command}", "WARN")
            return _bare_result("ignored", start, reason=f"unknown command {trigger.command!r}")

        try:
            payload = None if trigger.payload is None else decode_payload(trigger.payload)
            if is_deep_logging():
                deep_log(f"[DEEP][DISPATCH] command={trigger.command} payload={payload!r}")
            instruction = load_instruction(payload)
        except PayloadError as exc:
            log("DISPATCH", f"Command ({trigger.command}) - Failed to load payload: {exc}", "ERROR")
            return _bare_result("invalid", start, reason=str(exc))

        return self.dispatch(instruction)

    def dispatch(self, instruction: Instruction) -> ActionResult:
        start = time.monotonic()
        handler = self._handlers.get(instruction.action_type)
        if handler is None:
            log("DISPATCH", f"Unknown action type: {instruction.action_type}", "ERROR")
            return ActionResult(
                action_type=instruction.action_type,
                status="unsupported",
                target=instruction.target,
                details={"reason": "unknown action type"},
                elapsed_ms=int((time.monotonic() - start) * 1000),
            )

        log("DISPATCH", f"Running '{instruction.action_type}' on {len(instruction.items)} item(s) in '{instruction.target}'")
        try:
            return handler(instruction)
        except Exception as exc:
            log("DISPATCH", f"Action '{instruction.action_type}' crashed: {exc}", "ERROR")
            return ActionResult(
                action_type=instruction.action_type,
                status="failed",
                target=instruction.target,
                details={"reason": str(exc)},
                elapsed_ms=int((time.monotonic() - start) * 1000),
            )

    def join(self, timeout: float | None = None) -> bool:
        """Wait for background scripts started by this dispatcher."""
        return self.runner.join(timeout)


def _bare_result(status: str, start: float, **details: str) -> ActionResult:
    return ActionResult(
        action_type="",
        status=status,
        details=dict(details),
        elapsed_ms=int((time.monotonic() - start) * 1000),
    )
