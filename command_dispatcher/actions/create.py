"""Create a new file in the target directory without overwriting anything."""

from __future__ import annotations

import time
from collections.abc import Iterator
from pathlib import Path

from command_dispatcher.actions.base import ActionResult, BaseAction
from command_dispatcher.payload import Instruction
from utils.log_utils import log

DEFAULT_FILE_NAME = "New File.txt"
NAME_SEPARATOR = "|"


def split_create_action(action: str) -> tuple[str, str]:
    """Split ``name|content``; content may itself contain the separator."""
    name, _, content = action.partition(NAME_SEPARATOR)
    return (name.strip() or DEFAULT_FILE_NAME), content


def candidate_names(file_name: str) -> Iterator[str]:
    """Yield ``name``, ``stem (1).ext``, ``stem (2).ext``, ... lazily."""
    yield file_name
    dot = file_name.rfind(".")
    if dot > 0:
        stem, extension = file_name[:dot], file_name[dot:]
    else:
        stem, extension = file_name, ""
    counter = 1
    while True:
        yield f"{stem} ({counter}){extension}"
        counter += 1


def create_unique_file(directory: Path, file_name: str, content: str) -> Path:
    """Write ``content`` to the first free name in ``directory``.

    Existence is checked again for every candidate and the final write uses
    exclusive creation, so a file appearing between the check and the write
    just moves the search on to the next suffix.
    """
    names = candidate_names(file_name)
    while True:
        path = directory / next(names)
        if path.exists():
            continue
        try:
            with path.open("x", encoding="utf-8", newline="") as fh:
                fh.write(content)
        except FileExistsError:
            continue
        return path


class CreateAction(BaseAction):
    action_type = "create"

    def run(self, instruction: Instruction) -> ActionResult:
        start = time.monotonic()
        file_name, content = split_create_action(instruction.action)
        directory = Path(instruction.target)

        if Path(file_name).name != file_name or file_name in {".", ".."}:
            log("CREATE", f"Invalid file name '{file_name}' for '{directory}'.", "ERROR")
            return self._failed(instruction, "invalid file name", start, file_name=file_name)
        if not directory.is_dir():
            log("CREATE", f"Target directory '{directory}' does not exist.", "ERROR")
            return self._failed(instruction, "target is not a directory", start)

        try:
            path = create_unique_file(directory, file_name, content)
        except OSError as exc:
            log("CREATE", f"Failed to create file in '{directory}': {exc}", "ERROR")
            return self._failed(instruction, str(exc), start)

        log("CREATE", f"Created file '{path.name}' in '{directory}'.")
        return self._ok(instruction, start, path=str(path))
