"""Tests for per-OS command construction."""

import shutil
import subprocess
import sys

import pytest

from command_dispatcher.launchers.macos_launcher import MacOSLauncher
from command_dispatcher.launchers.posix_launcher import LinuxLauncher, PosixLauncher, quote_args
from command_dispatcher.launchers.router import get_launcher
from command_dispatcher.launchers.windows_launcher import WindowsLauncher

needs_bash = pytest.mark.skipif(
    sys.platform == "win32" or shutil.which("bash") is None,
    reason="bash required",
)

TRICKY_ITEMS = [
    "/tmp/with space.txt",
    "/tmp/it's here.txt",
    '/tmp/say "hi".txt',
    "/tmp/$HOME and `date`.txt",
    "/tmp/semi;colon|pipe&amp.txt",
    "",
]


class TestGetLauncher:
    """Test suite for launcher selection."""

    def test_known_systems(self):
        assert isinstance(get_launcher("Darwin"), MacOSLauncher)
        assert isinstance(get_launcher("macos"), MacOSLauncher)
        assert isinstance(get_launcher("win32"), WindowsLauncher)
        assert isinstance(get_launcher("Linux"), LinuxLauncher)

    def test_unknown_system_falls_back_to_posix(self):
        launcher = get_launcher("FreeBSD")
        assert type(launcher) is PosixLauncher


class TestOpenWithCommand:
    """Test suite for application launch argv."""

    def test_macos(self):
        assert MacOSLauncher().open_with_command("Preview", ["/a b.png"]) == [
            "open",
            "-a",
            "Preview",
            "/a b.png",
        ]

    def test_windows(self):
        assert WindowsLauncher().open_with_command("notepad", ["C:\\a.txt"]) == [
            "cmd",
            "/C",
            "start",
            "",
            "notepad",
            "C:\\a.txt",
        ]

    def test_linux(self):
        assert LinuxLauncher().open_with_command("gimp", []) == ["xdg-open", "gimp"]


class TestTerminalScript:
    """Test suite for generated terminal scripts."""

    def test_posix_script_layout(self):
        script = MacOSLauncher().terminal_script("/tmp/my dir", ["/tmp/a.txt"], "ls -la")
        lines = script.splitlines()

        assert lines[0] == "#!/bin/bash"
        assert lines[1] == "clear; cd '/tmp/my dir'; set -- /tmp/a.txt; ls -la"
        assert "Process finished. Press Enter to close." in script
        assert lines[-1] == "read; clear"

    def test_posix_script_without_items_clears_arguments(self):
        script = LinuxLauncher().terminal_script("/tmp", [], "echo $#")
        assert "set -- ; echo $#" in script

    def test_windows_script_layout(self):
        script = WindowsLauncher().terminal_script("C:\\Users\\me", ["C:\\a.txt"], "dir")

        assert script.startswith("@echo off\r\n")
        assert 'cls & cd /d "C:\\Users\\me" & dir\r\n' in script
        assert script.endswith("pause >nul & cls\r\n")

    def test_windows_items_go_on_command_line(self):
        argv = WindowsLauncher().open_terminal_command("C:\\t\\tooly-1.bat", ["C:\\a b.txt"])
        assert argv == ["cmd", "/C", "start", "", "cmd", "/K", "C:\\t\\tooly-1.bat", "C:\\a b.txt"]

    def test_posix_items_are_baked_into_script(self):
        argv = MacOSLauncher().open_terminal_command("/tmp/tooly-1.command", ["/a"])
        assert argv == ["open", "/tmp/tooly-1.command"]

    @needs_bash
    def test_quoted_items_survive_as_single_arguments(self):
        """Test that shell-significant characters reach the script unmangled."""
        script = f"set -- {quote_args(TRICKY_ITEMS)}; printf '%s\\0' \"$@\""
        completed = subprocess.run(
            ["bash", "--noprofile", "--norc", "-c", script],
            capture_output=True,
            check=True,
        )
        received = completed.stdout.decode("utf-8").split("\0")[:-1]
        assert received == TRICKY_ITEMS


class TestShellCommand:
    """Test suite for bounded script argv."""

    def test_posix_appends_items_after_separator(self):
        argv = LinuxLauncher().shell_command("echo $1", ["/a b", "/c"])
        assert argv == ["bash", "--noprofile", "--norc", "-c", "echo $1", "--", "/a b", "/c"]

    def test_windows(self):
        assert WindowsLauncher().shell_command("echo %1", ["C:\\a"]) == ["cmd", "/C", "echo %1", "C:\\a"]

    @needs_bash
    def test_posix_kill_tree_stops_children(self):
        """Test that killing the group also stops background children."""
        launcher = LinuxLauncher()
        process = launcher.spawn_captured(launcher.shell_command("sleep 30 & sleep 30; wait", []))
        launcher.kill_tree(process)
        stdout, _ = process.communicate(timeout=5)

        assert process.returncode != 0
        assert stdout == ""
