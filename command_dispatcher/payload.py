"""Decode trigger URLs into instructions.

A trigger looks like ``tooly://run?payload=<value>``. The context-menu
extension percent-encodes the JSON instruction once and the URL builder
encodes it again as a query value, so the value is decoded exactly twice.
The extension may also send the path of a payload file instead of inline
JSON; in that case the JSON is read from that file.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath
from urllib.parse import quote, unquote_to_bytes, urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

PAYLOAD_PARAM = "payload"

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class PayloadError(ValueError):
    """Raised when a trigger URL or its payload cannot be decoded."""


class Instruction(BaseModel):
    """A single decoded dispatch request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    target: str
    target_type: str = Field(alias="targetType")
    items: tuple[str, ...]
    action: str
    action_type: str = Field(alias="actionType")

    @field_validator("target")
    @classmethod
    def _target_is_absolute(cls, value: str) -> str:
        # Relative or empty targets would resolve against the host process cwd.
        if not (PurePosixPath(value).is_absolute() or PureWindowsPath(value).is_absolute()):
            raise ValueError(f"target must be an absolute directory path, got {value!r}")
        return value

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


@dataclass(frozen=True)
class Trigger:
    command: str
    payload: str | None


def percent_decode(value: str) -> str:
    """Strictly percent-decode one level (``+`` is left alone)."""
    match = _BAD_ESCAPE.search(value)
    if match:
        raise PayloadError(f"malformed percent-escape at offset {match.start()}")
    try:
        return unquote_to_bytes(value).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PayloadError(f"payload is not valid UTF-8: {exc}") from exc


def _raw_query_value(query: str, key: str) -> str | None:
    for pair in query.split("&"):
        name, sep, value = pair.partition("=")
        if name == key:
            return value if sep else ""
    return None


def split_trigger(url: str) -> Trigger:
    """Split a trigger URL into its command and the still-encoded payload value."""
    try:
        parts = urlsplit(str(url).strip())
    except ValueError as exc:
        raise PayloadError(f"malformed url: {exc}") from exc
    command = parts.netloc.rsplit("@", 1)[-1].split(":", 1)[0]
    if not parts.scheme or not command:
        raise PayloadError(f"url has no command: {url!r}")

    return Trigger(command=command, payload=_raw_query_value(parts.query, PAYLOAD_PARAM))


def decode_trigger(url: str) -> Trigger:
    """Split a trigger URL into its command and doubly-decoded payload."""
    trigger = split_trigger(url)
    if trigger.payload is None:
        return trigger
    return Trigger(command=trigger.command, payload=decode_payload(trigger.payload))


def decode_payload(raw: str) -> str:
    """Undo the two rounds of percent-encoding applied by the extension."""
    return percent_decode(percent_decode(raw))


def _read_payload_file(text: str) -> str | None:
    candidate = text.strip()
    if not candidate or candidate.startswith("{"):
        return None
    path = Path(candidate).expanduser()
    try:
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")
    except (OSError, ValueError) as exc:
        raise PayloadError(f"failed to read payload file '{candidate}': {exc}") from exc


def load_instruction(payload: str | None) -> Instruction:
    """Parse decoded payload text (inline JSON or a payload file path)."""
    if payload is None or not payload.strip():
        raise PayloadError("missing payload")
    text = _read_payload_file(payload) or payload
    try:
        return Instruction.model_validate_json(text)
    except ValidationError as exc:
        errors = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or 'payload'}: {err['msg']}"
            for err in exc.errors()
        )
        raise PayloadError(f"invalid payload ({errors})") from exc


def encode_trigger(instruction: Instruction, *, command: str = "run", scheme: str = "tooly") -> str:
    """Build a trigger URL the way the context-menu extension does."""
    text = json.dumps(instruction.to_payload(), ensure_ascii=False)
    return f"{scheme}://{command}?{PAYLOAD_PARAM}={quote(quote(text, safe=''), safe='')}"
