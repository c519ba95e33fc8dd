"""Decoding of raw input events into key events."""

from __future__ import annotations

from evdev import ecodes

from inputactions.core.keys import key_for_code
from inputactions.core.model import KeyEvent, OtherEvent, RawEvent, TriggerState


def decode_event(raw: RawEvent) -> KeyEvent | OtherEvent:
    if raw.kind != ecodes.EV_KEY:
        return OtherEvent(raw=raw)
    return KeyEvent(
        key=key_for_code(raw.code),
        state=TriggerState.from_value(raw.value),
        raw=raw,
    )
