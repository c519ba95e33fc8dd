"""Launching actions as child processes and reporting how they exited.

Launching never waits for the child: the process handle is handed to a
``ResultReporter`` worker thread through a bounded queue, and that worker is
the only place that blocks on child exit. A full queue blocks the launcher
rather than dropping the handle, so every launched action gets its exit
status logged.
"""

from __future__ import annotations

import logging
import queue
import signal
import subprocess
import threading
from collections.abc import Callable, Sequence

from inputactions.core.errors import LaunchError, ReportError
from inputactions.core.model import ActionSpec, ChildProcess, PendingAction

LOGGER = logging.getLogger(__name__)

DEFAULT_QUEUE_CAPACITY = 64


def _spawn(argv: Sequence[str]) -> ChildProcess:
    return subprocess.Popen(list(argv), stdin=subprocess.DEVNULL, start_new_session=True)


def _describe_status(code: int) -> str:
    if code < 0:
        try:
            return f"killed by {signal.Signals(-code).name}"
        except ValueError:
            return f"killed by signal {-code}"
    return f"exit status {code}"


class ResultReporter:
    def __init__(self, capacity: int = DEFAULT_QUEUE_CAPACITY) -> None:
        self._queue: queue.Queue[PendingAction | None] = queue.Queue(maxsize=capacity)
        self._closed = threading.Event()
        self._thread = threading.Thread(target=self._drain, name="inputactions-reporter", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def submit(self, pending: PendingAction) -> None:
        """Hand a spawned process over to the worker, blocking while the queue is full."""
        if self._closed.is_set():
            raise ReportError(f"completion queue is closed, '{pending.label}' will not be reported")
        self._queue.put(pending)

    def close(self, timeout: float | None = None) -> None:
        """Stop accepting actions and wait for already queued ones to be reported."""
        if self._closed.is_set():
            return
        self._closed.set()
        if not self._thread.is_alive():
            return
        try:
            self._queue.put(None, timeout=timeout)
        except queue.Full:
            LOGGER.warning("Completion queue still full, not waiting for running commands")
            return
        self._thread.join(timeout)
        if self._thread.is_alive():
            LOGGER.warning("Commands still running, not waiting for them to exit")

    def report(self, pending: PendingAction) -> int:
        try:
            code = pending.process.wait()
        except (OSError, subprocess.SubprocessError) as exc:
            raise ReportError(f"Failed to wait for '{pending.label}': {exc}") from exc

        if code == 0:
            LOGGER.debug("Command '%s' finished successfully", pending.label)
        else:
            LOGGER.error("Command '%s' failed: %s", pending.label, _describe_status(code))
        return code

    def _drain(self) -> None:
        while True:
            pending = self._queue.get()
            try:
                if pending is None:
                    return
                self.report(pending)
            except ReportError as exc:
                LOGGER.error("%s", exc)
            finally:
                self._queue.task_done()


class ActionRunner:
    def __init__(
        self,
        reporter: ResultReporter,
        *,
        spawn: Callable[[Sequence[str]], ChildProcess] = _spawn,
    ) -> None:
        self._reporter = reporter
        self._spawn = spawn

    def run(self, action: ActionSpec) -> None:
        """Start ``action`` without waiting for it; raise LaunchError if it cannot start."""
        try:
            process = self._spawn(action.argv)
        except (OSError, ValueError) as exc:
            raise LaunchError(f"Could not start '{action.program}': {exc}") from exc

        try:
            self._reporter.submit(PendingAction(label=action.program, process=process))
        except ReportError as exc:
            LOGGER.error("%s", exc)
