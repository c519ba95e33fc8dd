"""Service layer wiring the locator, listener, and action workers together."""

from __future__ import annotations

from inputactions.core.actions import ActionRunner, ResultReporter
from inputactions.core.listener import DeviceListener
from inputactions.core.locator import DeviceLocator
from inputactions.core.model import Config
from inputactions.devices.base import DeviceBackend
from inputactions.devices.evdev_backend import DEV_INPUT, EvdevBackend

SHUTDOWN_TIMEOUT_S = 5.0


class InputActionsDaemon:
    def __init__(
        self,
        config: Config,
        *,
        backend: DeviceBackend | None = None,
        reporter: ResultReporter | None = None,
        runner: ActionRunner | None = None,
        directory: str = DEV_INPUT,
    ) -> None:
        self.config = config
        self.backend = backend or EvdevBackend(directory)
        self.reporter = reporter or ResultReporter()
        self.runner = runner or ActionRunner(self.reporter)
        self.listener = DeviceListener(config, self.runner)
        self.locator = DeviceLocator(config, self.listener, self.backend, directory=directory)

    def run(self) -> None:
        self.reporter.start()
        try:
            self.locator.run()
        finally:
            self.reporter.close(timeout=SHUTDOWN_TIMEOUT_S)
