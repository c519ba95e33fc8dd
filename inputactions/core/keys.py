"""Key-name table backed by the Linux input event codes shipped with evdev."""

from __future__ import annotations

from evdev import ecodes

from inputactions.core.errors import ConfigError
from inputactions.core.model import KeyIdentity

_KEY_PREFIXES = ("KEY_", "BTN_")


def parse_key_name(name: str) -> KeyIdentity:
    """Resolve a symbolic name such as ``KEY_VOLUMEUP`` or ``BTN_LEFT``."""
    code = ecodes.ecodes.get(name) if name.startswith(_KEY_PREFIXES) else None
    if code is None:
        raise ConfigError(f"invalid key name '{name}'")
    return KeyIdentity(code=code, name=name)


def key_for_code(code: int) -> KeyIdentity:
    names = ecodes.KEY.get(code) or ecodes.BTN.get(code)
    if isinstance(names, (list, tuple)):
        names = names[0]
    return KeyIdentity(code=code, name=names or "")
