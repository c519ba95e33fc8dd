from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Sequence

import pytest
from evdev import ecodes

from inputactions.core.actions import ActionRunner, ResultReporter
from inputactions.core.config_loader import parse_action, parse_config
from inputactions.core.errors import DeviceReadError
from inputactions.core.keys import parse_key_name
from inputactions.core.listener import DeviceListener, SessionEnd
from inputactions.core.model import ActionSpec, Config, RawEvent, Rule, TriggerState

CONFIG = """
name: testdevice
actions:
  - key: KEY_A
    on: release
    action: echo released
  - key: KEY_B
    action: /nonexistent/inputactions-program
  - key: KEY_C
    action: echo c
"""


def key(code: int, value: int) -> RawEvent:
    return RawEvent(kind=ecodes.EV_KEY, code=code, value=value)


class FakeDevice:
    def __init__(self, name: str, batches: Sequence[list[RawEvent]] = ()) -> None:
        self.path = "/dev/input/event0"
        self.name = name
        self._batches = list(batches)

    def read_batches(self) -> Iterator[list[RawEvent]]:
        yield from self._batches
        raise DeviceReadError(f"{self.path}: No such device")

    def close(self) -> None:
        pass


class FakeProcess:
    def __init__(self, code: int = 0, release: threading.Event | None = None) -> None:
        self.code = code
        self.release = release
        self.waited = threading.Event()

    def wait(self) -> int:
        if self.release is not None:
            self.release.wait()
        self.waited.set()
        return self.code


class RecordingSpawn:
    def __init__(self, make_process=FakeProcess) -> None:
        self.calls: list[list[str]] = []
        self.processes: list[FakeProcess] = []
        self._make_process = make_process

    def __call__(self, argv: Sequence[str]) -> FakeProcess:
        self.calls.append(list(argv))
        process = self._make_process()
        self.processes.append(process)
        return process


def _listener(spawn=None) -> tuple[DeviceListener, ResultReporter]:
    reporter = ResultReporter()
    runner = ActionRunner(reporter, spawn=spawn) if spawn else ActionRunner(reporter)
    return DeviceListener(parse_config(CONFIG), runner), reporter


def test_only_matching_state_dispatches() -> None:
    spawn = RecordingSpawn()
    listener, _ = _listener(spawn)

    device = FakeDevice("testdevice", [[key(ecodes.KEY_A, 1), key(ecodes.KEY_A, 0)]])
    assert listener.listen(device) is SessionEnd.DISCONNECTED

    assert spawn.calls == [["echo", "released"]]


def test_non_key_events_ignored() -> None:
    spawn = RecordingSpawn()
    listener, _ = _listener(spawn)

    batch = [
        RawEvent(kind=ecodes.EV_MSC, code=ecodes.MSC_SCAN, value=458756),
        RawEvent(kind=ecodes.EV_SYN, code=ecodes.SYN_REPORT, value=0),
        key(ecodes.KEY_C, 1),
    ]
    listener.listen(FakeDevice("testdevice", [batch]))

    assert spawn.calls == [["echo", "c"]]


def test_launch_failure_does_not_stop_batch(caplog: pytest.LogCaptureFixture) -> None:
    reporter = ResultReporter()
    spawned: list[list[str]] = []

    class Spawn(RecordingSpawn):
        def __call__(self, argv):
            if argv[0].startswith("/nonexistent"):
                raise FileNotFoundError(2, "No such file or directory", argv[0])
            spawned.append(list(argv))
            return FakeProcess(0)

    listener = DeviceListener(parse_config(CONFIG), ActionRunner(reporter, spawn=Spawn()))
    device = FakeDevice("testdevice", [[key(ecodes.KEY_B, 1), key(ecodes.KEY_C, 1)]])

    assert listener.listen(device) is SessionEnd.DISCONNECTED
    assert spawned == [["echo", "c"]]
    assert "Could not start '/nonexistent/inputactions-program'" in caplog.text


def test_real_missing_program_is_survived(caplog: pytest.LogCaptureFixture) -> None:
    listener, reporter = _listener()
    assert listener.handle(key(ecodes.KEY_B, 1)) is not None
    assert "Could not start" in caplog.text
    reporter.close()


def test_decode_error_ends_session(caplog: pytest.LogCaptureFixture) -> None:
    spawn = RecordingSpawn()
    listener, _ = _listener(spawn)

    device = FakeDevice(
        "testdevice",
        [[key(ecodes.KEY_C, 1), key(ecodes.KEY_C, 7), key(ecodes.KEY_C, 1)]],
    )

    assert listener.listen(device) is SessionEnd.DECODE_ERROR
    assert spawn.calls == [["echo", "c"]]
    assert "unexpected value from key event: 7" in caplog.text


def test_read_error_ends_session_cleanly(caplog: pytest.LogCaptureFixture) -> None:
    listener, _ = _listener(RecordingSpawn())

    assert listener.listen(FakeDevice("testdevice")) is SessionEnd.DISCONNECTED
    assert "device went away" in caplog.text


def test_hung_action_does_not_delay_later_events() -> None:
    never = threading.Event()
    spawn = RecordingSpawn(make_process=lambda: FakeProcess(0, release=never))
    listener, reporter = _listener(spawn)
    reporter.start()

    device = FakeDevice(
        "testdevice",
        [[key(ecodes.KEY_C, 1)], [key(ecodes.KEY_C, 1)], [key(ecodes.KEY_A, 0)]],
    )
    result: list[SessionEnd] = []
    thread = threading.Thread(target=lambda: result.append(listener.listen(device)))
    thread.start()
    thread.join(timeout=5)

    assert result == [SessionEnd.DISCONNECTED]
    assert spawn.calls == [["echo", "c"], ["echo", "c"], ["echo", "released"]]
    assert not spawn.processes[0].waited.is_set()

    never.set()
    reporter.close(timeout=5)
    assert all(p.waited.is_set() for p in spawn.processes)


def test_unlaunchable_argument_does_not_stop_session(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="inputactions")
    config = Config(
        name="testdevice",
        rules=(
            Rule(parse_key_name("KEY_A"), TriggerState.PRESS, ActionSpec(argv=("echo", "a\0b"), command="echo a\\0b")),
            Rule(parse_key_name("KEY_B"), TriggerState.PRESS, parse_action("true")),
        ),
    )
    reporter = ResultReporter()
    reporter.start()
    listener = DeviceListener(config, ActionRunner(reporter))

    device = FakeDevice("testdevice", [[key(ecodes.KEY_A, 1), key(ecodes.KEY_B, 1)]])

    assert listener.listen(device) is SessionEnd.DISCONNECTED
    reporter.close(timeout=10)
    assert "Could not start 'echo'" in caplog.text
    assert "Running command 'true' for KEY_B press" in caplog.text
