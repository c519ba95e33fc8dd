"""Domain-specific errors for inputactions."""


class InputActionsError(Exception):
    """Base error for inputactions."""


class ConfigError(InputActionsError):
    """Raised when the configuration document is malformed or invalid."""


class ConfigLoadError(ConfigError):
    """Raised when no configuration source can be read."""


class DeviceOpenError(InputActionsError):
    """Raised when a path cannot be opened as an input device."""


class DeviceReadError(InputActionsError):
    """Raised when an open device stops producing events (usually unplugged)."""


class EventDecodeError(InputActionsError):
    """Raised when a key event carries an unexpected value."""


class LaunchError(InputActionsError):
    """Raised when an action's program cannot be started."""


class ReportError(InputActionsError):
    """Raised when a spawned action cannot be handed over or waited on."""


class WatchInitError(InputActionsError):
    """Raised when the device directory watch cannot be established or is lost."""
