"""Reading one device and dispatching actions for matching key events."""

from __future__ import annotations

import logging
from enum import Enum

from inputactions.core.actions import ActionRunner
from inputactions.core.errors import DeviceReadError, EventDecodeError, LaunchError
from inputactions.core.events import decode_event
from inputactions.core.model import Config, KeyEvent, RawEvent, Rule
from inputactions.devices.base import InputSource

LOGGER = logging.getLogger(__name__)


class SessionEnd(Enum):
    DISCONNECTED = "disconnected"
    DECODE_ERROR = "decode-error"


class DeviceListener:
    def __init__(self, config: Config, runner: ActionRunner) -> None:
        self._config = config
        self._runner = runner

    def handle(self, raw: RawEvent) -> Rule | None:
        """Dispatch the action for a single event, returning the rule that fired."""
        event = decode_event(raw)
        if not isinstance(event, KeyEvent):
            return None

        rule = self._config.find(event.key, event.state)
        if rule is None:
            return None

        LOGGER.info("Running command '%s' for %s %s", rule.action.command, event.key, event.state.value)
        try:
            self._runner.run(rule.action)
        except LaunchError as exc:
            LOGGER.error("%s", exc)
        return rule

    def listen(self, device: InputSource) -> SessionEnd:
        """Process events from ``device`` until it can no longer be read."""
        LOGGER.info("%s: listening for input events from '%s'", device.path, device.name)
        try:
            for batch in device.read_batches():
                for raw in batch:
                    LOGGER.debug("%s: received %s", device.path, raw)
                    self.handle(raw)
        except DeviceReadError as exc:
            LOGGER.warning("%s: device went away: %s", device.path, exc)
            return SessionEnd.DISCONNECTED
        except EventDecodeError as exc:
            LOGGER.error("%s: stopped listening: %s", device.path, exc)
            return SessionEnd.DECODE_ERROR
        # read_batches only ends by raising; an exhausted source counts as gone.
        LOGGER.warning("%s: device stopped producing events", device.path)
        return SessionEnd.DISCONNECTED
