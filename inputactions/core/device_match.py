"""Device-to-config matching logic."""

from __future__ import annotations

import logging

from inputactions.core.model import Config
from inputactions.devices.base import InputSource

LOGGER = logging.getLogger(__name__)


def device_matches(config: Config, device: InputSource) -> bool:
    name = device.name
    if not name:
        LOGGER.debug("%s: device has no name", device.path)
        return False
    if name == config.name:
        LOGGER.debug("%s: device name '%s' == '%s'", device.path, name, config.name)
        return True
    LOGGER.debug("%s: device name '%s' != '%s'", device.path, name, config.name)
    return False
