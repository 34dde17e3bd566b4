"""Action interfaces and result payloads."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from command_dispatcher.payload import Instruction


@dataclass
class ActionResult:
    action_type: str
    status: str
    target: str = ""
    details: dict[str, Any] | None = None
    elapsed_ms: int | None = None
    # Background handle for actions that keep running after dispatch returns.
    task: Any = None

    @property
    def ok(self) -> bool:
        return self.status in {"ok", "started"}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "action_type": self.action_type,
            "status": self.status,
            "target": self.target,
        }
        if self.details is not None:
            payload["details"] = self.details
        if self.elapsed_ms is not None:
            payload["elapsed_ms"] = self.elapsed_ms
        return payload


class BaseAction:
    """Shared result helpers; subclasses implement ``run``."""

    action_type = "unknown"

    def run(self, instruction: Instruction) -> ActionResult:
        raise NotImplementedError

    def _ok(self, instruction: Instruction, start: float, **details: Any) -> ActionResult:
        return self._result(instruction, "ok", start, details or None)

    def _failed(self, instruction: Instruction, reason: str, start: float, **details: Any) -> ActionResult:
        return self._result(instruction, "failed", start, {"reason": reason, **details})

    def _result(
        self,
        instruction: Instruction,
        status: str,
        start: float,
        details: dict[str, Any] | None,
    ) -> ActionResult:
        return make_result(instruction, status, start, details)


def make_result(
    instruction: Instruction,
    status: str,
    start: float,
    details: dict[str, Any] | None = None,
) -> ActionResult:
    elapsed_ms = int((time.monotonic() - start) * 1000)
    return ActionResult(
        action_type=instruction.action_type,
        status=status,
        target=instruction.target,
        details=details,
        elapsed_ms=elapsed_ms,
    )
