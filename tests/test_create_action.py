"""Tests for the collision-safe create action."""

import itertools
import os
import sys
from pathlib import Path

import pytest

from command_dispatcher.actions.create import (
    DEFAULT_FILE_NAME,
    CreateAction,
    candidate_names,
    split_create_action,
)


class TestSplitCreateAction:
    """Test suite for the name|content split."""

    def test_name_and_content(self):
        assert split_create_action("notes.md|# Title") == ("notes.md", "# Title")

    def test_defaults(self):
        assert split_create_action("") == (DEFAULT_FILE_NAME, "")
        assert split_create_action("|hello") == (DEFAULT_FILE_NAME, "hello")
        assert split_create_action("todo.txt") == ("todo.txt", "")

    def test_content_keeps_extra_separators(self):
        assert split_create_action("table.csv|a|b|c") == ("table.csv", "a|b|c")


class TestCandidateNames:
    """Test suite for the suffix sequence."""

    def _first(self, name, count=4):
        return list(itertools.islice(candidate_names(name), count))

    def test_extension_is_kept_after_suffix(self):
        assert self._first("a.txt") == ["a.txt", "a (1).txt", "a (2).txt", "a (3).txt"]

    def test_split_at_last_dot(self):
        assert self._first("archive.tar.gz", 2) == ["archive.tar.gz", "archive.tar (1).gz"]

    def test_no_extension(self):
        assert self._first("Makefile", 2) == ["Makefile", "Makefile (1)"]

    def test_dotfile_has_no_extension(self):
        assert self._first(".env", 2) == [".env", ".env (1)"]


class TestCreateAction:
    """Test suite for CreateAction.run()."""

    def test_creates_file_with_content(self, tmp_path, make_instruction):
        """Test that name and content are honoured."""
        result = CreateAction().run(make_instruction(action="notes.md|# Title\n"))

        assert result.status == "ok"
        assert (tmp_path / "notes.md").read_text(encoding="utf-8") == "# Title\n"
        assert result.details["path"] == str(tmp_path / "notes.md")

    def test_default_name_when_action_is_empty(self, tmp_path, make_instruction):
        """Test that an empty action creates an empty 'New File.txt'."""
        result = CreateAction().run(make_instruction(action=""))

        assert result.status == "ok"
        assert (tmp_path / DEFAULT_FILE_NAME).read_text(encoding="utf-8") == ""

    def test_picks_first_free_suffix(self, tmp_path, make_instruction):
        """Test that existing files are skipped and never overwritten."""
        (tmp_path / "a.txt").write_text("original", encoding="utf-8")
        (tmp_path / "a (1).txt").write_text("first copy", encoding="utf-8")

        result = CreateAction().run(make_instruction(action="a.txt|new"))

        assert result.status == "ok"
        assert (tmp_path / "a (2).txt").read_text(encoding="utf-8") == "new"
        assert (tmp_path / "a.txt").read_text(encoding="utf-8") == "original"
        assert (tmp_path / "a (1).txt").read_text(encoding="utf-8") == "first copy"

    def test_fills_gap_in_sequence(self, tmp_path, make_instruction):
        """Test that the earliest free name wins, even below taken suffixes."""
        (tmp_path / "a.txt").touch()
        (tmp_path / "a (2).txt").touch()

        CreateAction().run(make_instruction(action="a.txt"))

        assert (tmp_path / "a (1).txt").exists()
        assert not (tmp_path / "a (3).txt").exists()

    def test_repeated_creates(self, tmp_path, make_instruction):
        """Test that each run produces the next name."""
        action = CreateAction()
        for _ in range(3):
            action.run(make_instruction(action="x.txt"))

        assert sorted(p.name for p in tmp_path.iterdir()) == ["x (1).txt", "x (2).txt", "x.txt"]

    def test_file_appearing_after_check_is_not_overwritten(self, tmp_path, make_instruction, monkeypatch):
        """Test that exclusive creation moves on when the existence check was stale."""
        (tmp_path / "a.txt").write_text("theirs", encoding="utf-8")
        monkeypatch.setattr(Path, "exists", lambda self: False)

        result = CreateAction().run(make_instruction(action="a.txt|ours"))

        assert result.status == "ok"
        assert (tmp_path / "a.txt").read_text(encoding="utf-8") == "theirs"
        assert (tmp_path / "a (1).txt").read_text(encoding="utf-8") == "ours"

    def test_missing_target_directory(self, tmp_path, make_instruction, capsys):
        """Test that a missing target fails without side effects."""
        missing = tmp_path / "missing"
        result = CreateAction().run(make_instruction(target=str(missing), action="a.txt"))

        assert result.status == "failed"
        assert not missing.exists()
        assert str(missing) in capsys.readouterr().err

    def test_name_with_directory_is_rejected(self, tmp_path, make_instruction):
        """Test that names cannot escape the target directory."""
        result = CreateAction().run(make_instruction(action="../escape.txt|x"))

        assert result.status == "failed"
        assert not (tmp_path.parent / "escape.txt").exists()

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="POSIX permissions required (and not enforced for root)",
    )
    def test_permission_denied_is_reported(self, tmp_path, make_instruction, capsys):
        """Test that an unwritable target is logged with its path."""
        locked = tmp_path / "locked"
        locked.mkdir()
        locked.chmod(0o500)
        try:
            result = CreateAction().run(make_instruction(target=str(locked), action="a.txt"))
        finally:
            locked.chmod(0o700)

        assert result.status == "failed"
        err = capsys.readouterr().err
        assert "[CREATE][ERROR]" in err
        assert str(locked) in err
