"""Finding the configured device at startup and whenever it is plugged in again.

The locator and the listener share one thread of control, so at most one
device session exists at a time:

    IDLE -> SCANNING -> (LISTENING) -> WATCHING -> LISTENING -> WATCHING ...

After the startup session ends the locator does not enumerate again; it only
reacts to device nodes appearing in the watched directory.
"""

from __future__ import annotations

import logging
import os
from enum import Enum

from inputactions.core.device_match import device_matches
from inputactions.core.errors import DeviceOpenError
from inputactions.core.listener import DeviceListener, SessionEnd
from inputactions.core.model import Config
from inputactions.devices.base import DeviceBackend, DirectoryWatcher, InputSource
from inputactions.devices.evdev_backend import DEV_INPUT

LOGGER = logging.getLogger(__name__)


class LocatorState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    LISTENING = "listening"
    WATCHING = "watching"


class DeviceLocator:
    def __init__(
        self,
        config: Config,
        listener: DeviceListener,
        backend: DeviceBackend,
        *,
        directory: str = DEV_INPUT,
    ) -> None:
        self._config = config
        self._listener = listener
        self._backend = backend
        self.directory = directory
        self.state = LocatorState.IDLE
        self.last_session_end: SessionEnd | None = None

    def run(self) -> None:
        """Scan once, then follow hot-plug notifications until they run out."""
        # Raises WatchInitError before any device is opened.
        watch = self._backend.watch(self.directory)
        with watch:
            self.scan()
            self.watch(watch)
        self.state = LocatorState.IDLE

    def scan(self) -> SessionEnd | None:
        self.state = LocatorState.SCANNING
        LOGGER.info("Enumerating initial devices...")
        for device in self._backend.enumerate():
            if device_matches(self._config, device):
                return self._listen(device)
            device.close()
        LOGGER.info("No device named '%s' present yet", self._config.name)
        return None

    def watch(self, notifications: DirectoryWatcher) -> None:
        self.state = LocatorState.WATCHING
        LOGGER.info("Listening for device events in %s...", self.directory)
        for event in notifications:
            LOGGER.debug("Received directory event %s", event)
            if event.name is None:
                continue
            path = os.path.join(self.directory, event.name)
            LOGGER.debug("%s: trying to open device", path)
            try:
                device = self._backend.open(path)
            except DeviceOpenError as exc:
                LOGGER.debug("%s", exc)
                continue
            if device_matches(self._config, device):
                self._listen(device)
                self.state = LocatorState.WATCHING
            else:
                device.close()

    def _listen(self, device: InputSource) -> SessionEnd:
        self.state = LocatorState.LISTENING
        try:
            outcome = self._listener.listen(device)
        finally:
            device.close()
        self.last_session_end = outcome
        if outcome is SessionEnd.DECODE_ERROR:
            LOGGER.warning(
                "%s: dropped after an undecodable event, waiting for '%s' to reappear",
                device.path,
                self._config.name,
            )
        else:
            LOGGER.info("%s: disconnected, waiting for '%s'", device.path, self._config.name)
        return outcome
