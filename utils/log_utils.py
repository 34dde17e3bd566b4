"""Console logging for the dispatcher.

Every line reads ``[timestamp][SYSTEM][LEVEL] text``. Callers may write the
tags in either order (``[ERROR][SCRIPT]`` or ``[SCRIPT][ERROR]``); the system
always comes first in the output. WARN and ERROR lines go to stderr so the
desktop shell can tell failures apart from script output.
"""

from __future__ import annotations

import builtins
import re
import sys
import time
from typing import Any, NamedTuple


LEVELS = frozenset({"DEEP", "DEBUG", "INFO", "WARN", "ERROR"})
STDERR_LEVELS = frozenset({"WARN", "ERROR"})
DEFAULT_SYSTEM = "APP"

_LEADING_TAG = re.compile(r"\s*\[([^\[\]]*\S[^\[\]]*)\]")


class LogLine(NamedTuple):
    system: str
    level: str | None
    extra: tuple[str, ...]
    text: str

    def render(self) -> str:
        head = f"[{self.system}]" + (f"[{self.level}]" if self.level else "")
        if self.extra:
            head += f" [{' '.join(self.extra)}]"
        return f"{head} {self.text}" if self.text else head


def parse_line(message: str) -> LogLine:
    tags: list[str] = []
    pos = 0
    while match := _LEADING_TAG.match(message, pos):
        tags.append(match.group(1).strip())
        pos = match.end()
    text = message[pos:].strip()

    if not tags:
        return LogLine(DEFAULT_SYSTEM, None, (), text)
    if tags[0].upper() in LEVELS:
        system = tags[1] if len(tags) > 1 else DEFAULT_SYSTEM
        return LogLine(system, tags[0].upper(), tuple(tags[2:]), text)
    level = tags[1].upper() if len(tags) > 1 else None
    return LogLine(tags[0], level, tuple(tags[2:]), text)


def format_line(message: str) -> str:
    return parse_line(message).render()


def tprint(*args: Any, **kwargs: Any) -> None:
    """Print ``args`` as one timestamped log line."""
    line = parse_line(" ".join(str(arg) for arg in args))
    if "file" not in kwargs and line.level in STDERR_LEVELS:
        kwargs["file"] = sys.stderr
    builtins.print(f"[{time.strftime('%Y-%m-%d %H:%M:%S')}]{line.render()}", **kwargs)


def log(system: str, message: str, level: str | None = None) -> None:
    """Log ``message`` under ``system`` (DISPATCH, SCRIPT, ...) at an optional level."""
    tprint(f"[{system}][{level}] {message}" if level else f"[{system}] {message}")
