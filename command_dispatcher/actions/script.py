"""Run a script non-interactively with a hard deadline.

Nobody is watching these processes, so every run happens on its own
background thread and is killed (with its children) once the deadline
passes. ``submit`` never blocks the caller.
"""

from __future__ import annotations

import subprocess
import threading
import time
from collections.abc import Callable
from pathlib import Path

from command_dispatcher.actions.base import ActionResult, BaseAction, make_result
from command_dispatcher.launchers.base import ProcessLauncher
from command_dispatcher.payload import Instruction
from utils.log_utils import log
from utils.settings_store import deep_log, is_deep_logging
from utils.threading_utils import run_async

SCRIPT_TIMEOUT_SECS = 120
KILL_GRACE_SECS = 5


class ScriptTask:
    """Execution handle for one bounded script run."""

    def __init__(
        self,
        instruction: Instruction,
        launcher: ProcessLauncher,
        timeout: float,
        on_done: Callable[[ScriptTask], None] | None = None,
    ) -> None:
        self.instruction = instruction
        self.timeout = timeout
        self.deadline: float | None = None
        self.outcome: ActionResult | None = None
        self._launcher = launcher
        self._process: subprocess.Popen | None = None
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._on_done = on_done

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def pid(self) -> int | None:
        with self._lock:
            return self._process.pid if self._process else None

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the task finished; returns False if ``timeout`` elapsed first."""
        return self._done.wait(timeout)

    def kill(self) -> bool:
        """Best-effort kill of the process tree. Failures are logged, never raised."""
        with self._lock:
            process = self._process
        if process is None or process.poll() is not None:
            return False
        try:
            self._launcher.kill_tree(process)
        except OSError as exc:
            log("SCRIPT", f"Failed to kill script process {process.pid}: {exc}", "ERROR")
            return False
        return True

    def run(self) -> ActionResult:
        """Execute on the current thread; called by the runner's worker thread."""
        start = time.monotonic()
        try:
            self.outcome = self._execute(start)
        except Exception as exc:
            log("SCRIPT", f"Unexpected failure while running script: {exc}", "ERROR")
            self.kill()
            self.outcome = make_result(self.instruction, "failed", start, {"reason": str(exc)})
        finally:
            if self._on_done is not None:
                self._on_done(self)
            self._done.set()
        return self.outcome

    def _execute(self, start: float) -> ActionResult:
        instruction = self.instruction
        argv = self._launcher.shell_command(instruction.action, instruction.items)
        cwd = instruction.target if Path(instruction.target).is_dir() else None
        try:
            process = self._launcher.spawn_captured(argv, cwd=cwd)
        except OSError as exc:
            log("SCRIPT", f"Failed to execute script '{instruction.action}': {exc}", "ERROR")
            return make_result(instruction, "failed", start, {"reason": "spawn failed", "error": str(exc)})

        with self._lock:
            self._process = process
            self.deadline = time.monotonic() + self.timeout

        try:
            stdout, stderr = process.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            return self._on_timeout(process, start)
        except OSError as exc:
            log("SCRIPT", f"Failed while waiting for command: {exc}", "ERROR")
            self.kill()
            return make_result(instruction, "failed", start, {"reason": "wait failed", "error": str(exc)})

        stdout = (stdout or "").strip()
        stderr = (stderr or "").strip()
        if stdout:
            log("SCRIPT", f"Output: {stdout}")
        if stderr:
            log("SCRIPT", f"Error: {stderr}", "ERROR")
        if process.returncode == 0:
            log("SCRIPT", "Script finished: exit=0")
        else:
            log("SCRIPT", f"Script finished: exit={process.returncode}", "WARN")
        return make_result(
            instruction,
            "ok",
            start,
            {"returncode": process.returncode, "stdout": stdout, "stderr": stderr},
        )

    def _on_timeout(self, process: subprocess.Popen, start: float) -> ActionResult:
        log("SCRIPT", f"Execution took too long (timeout after {self.timeout:g}s).", "ERROR")
        self.kill()
        try:
            stdout, stderr = process.communicate(timeout=KILL_GRACE_SECS)
        except (subprocess.TimeoutExpired, OSError) as exc:
            log("SCRIPT", f"Process {process.pid} did not exit after kill: {exc}", "ERROR")
            stdout, stderr = "", ""
        stdout = (stdout or "").strip()
        stderr = (stderr or "").strip()
        if is_deep_logging():
            deep_log(f"[DEEP][SCRIPT] partial output pid={process.pid} stdout={stdout!r} stderr={stderr!r}")
        return make_result(
            self.instruction,
            "timeout",
            start,
            {
                "reason": "timeout",
                "timeout_s": self.timeout,
                "partial_stdout": stdout,
                "partial_stderr": stderr,
            },
        )


class BoundedScriptRunner(BaseAction):
    """Dispatch entry for ``script`` instructions."""

    action_type = "script"

    def __init__(self, launcher: ProcessLauncher, *, timeout: float = SCRIPT_TIMEOUT_SECS) -> None:
        self._launcher = launcher
        self._timeout = timeout
        self._active: set[ScriptTask] = set()
        self._lock = threading.Lock()

    @property
    def timeout(self) -> float:
        return self._timeout

    def submit(self, instruction: Instruction) -> ScriptTask:
        """Start ``instruction`` on its own background thread and return its handle."""
        task = ScriptTask(instruction, self._launcher, self._timeout, on_done=self._finished)
        with self._lock:
            self._active.add(task)
        try:
            run_async(task.run, name="tooly-script")
        except RuntimeError:
            self._finished(task)
            raise
        return task

    def run(self, instruction: Instruction) -> ActionResult:
        start = time.monotonic()
        task = self.submit(instruction)
        log("SCRIPT", f"Started script in background: {instruction.action}")
        result = self._result(instruction, "started", start, {"timeout_s": self._timeout})
        result.task = task
        return result

    def _finished(self, task: ScriptTask) -> None:
        with self._lock:
            self._active.discard(task)

    def active_tasks(self) -> list[ScriptTask]:
        with self._lock:
            return list(self._active)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for every in-flight task; returns False if ``timeout`` ran out."""
        deadline = None if timeout is None else time.monotonic() + timeout
        for task in self.active_tasks():
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not task.wait(remaining):
                return False
        return True
