"""Input devices read through python-evdev."""

from __future__ import annotations

import logging
import select
from collections.abc import Iterator

import evdev

from inputactions.core.errors import DeviceOpenError, DeviceReadError
from inputactions.core.model import RawEvent
from inputactions.devices.dir_watch import DirectoryWatch

LOGGER = logging.getLogger(__name__)

DEV_INPUT = "/dev/input"


class EvdevInputSource:
    def __init__(self, device: evdev.InputDevice) -> None:
        self._device = device
        self.path = device.path

    @property
    def name(self) -> str | None:
        return self._device.name or None

    def read_batches(self) -> Iterator[list[RawEvent]]:
        while True:
            try:
                select.select([self._device.fd], [], [])
                events = list(self._device.read())
            except BlockingIOError:
                continue
            except OSError as exc:
                raise DeviceReadError(f"{self.path}: read failed: {exc}") from exc
            yield [RawEvent(kind=ev.type, code=ev.code, value=ev.value) for ev in events]

    def close(self) -> None:
        try:
            self._device.close()
        except OSError as exc:
            LOGGER.debug("%s: close failed: %s", self.path, exc)

    def __repr__(self) -> str:
        return f"EvdevInputSource(path={self.path!r}, name={self.name!r})"


class EvdevBackend:
    def __init__(self, directory: str = DEV_INPUT) -> None:
        self.directory = directory

    def enumerate(self) -> Iterator[EvdevInputSource]:
        for path in evdev.list_devices(self.directory):
            try:
                yield self.open(path)
            except DeviceOpenError as exc:
                LOGGER.debug("%s", exc)

    def open(self, path: str) -> EvdevInputSource:
        try:
            device = evdev.InputDevice(path)
        except OSError as exc:
            raise DeviceOpenError(f"{path}: failed to open device: {exc}") from exc
        return EvdevInputSource(device)

    def watch(self, directory: str) -> DirectoryWatch:
        return DirectoryWatch(directory).start()
