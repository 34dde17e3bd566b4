"""Shared fixtures for dispatcher tests."""

from unittest.mock import Mock

import pytest

from command_dispatcher.launchers.posix_launcher import LinuxLauncher
from command_dispatcher.payload import Instruction
from utils import settings_store


class RecordingLauncher(LinuxLauncher):
    """Linux command construction, but detached spawns are only recorded."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.calls: list[list[str]] = []
        self.fail_with = fail_with

    def spawn_detached(self, argv, *, cwd=None):
        if self.fail_with is not None:
            raise self.fail_with
        self.calls.append(list(argv))
        return Mock(pid=4242)


@pytest.fixture
def recording_launcher():
    return RecordingLauncher()


@pytest.fixture
def make_instruction(tmp_path):
    def _make(**overrides) -> Instruction:
        data = {
            "target": str(tmp_path),
            "targetType": "folder",
            "items": [],
            "action": "",
            "actionType": "create",
        }
        data.update(overrides)
        return Instruction.model_validate(data)

    return _make


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    yield
    with settings_store._lock:
        settings_store._settings_cache.clear()


@pytest.fixture
def failing_launcher():
    def _make(exc: Exception) -> RecordingLauncher:
        return RecordingLauncher(fail_with=exc)

    return _make
