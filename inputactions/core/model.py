"""Core data models used across loader, listener, locator, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from inputactions.core.errors import ConfigError, EventDecodeError


@dataclass(frozen=True)
class KeyIdentity:
    code: int
    name: str = field(default="", compare=False)

    def __str__(self) -> str:
        return self.name or f"<key {self.code}>"


class TriggerState(Enum):
    PRESS = "press"
    RELEASE = "release"
    REPEAT = "repeat"

    @classmethod
    def from_value(cls, value: int) -> TriggerState:
        """Decode the value carried by a key event (0 release, 1 press, 2 repeat)."""
        try:
            return _STATE_BY_VALUE[value]
        except (KeyError, TypeError):
            raise EventDecodeError(f"unexpected value from key event: {value}") from None

    @classmethod
    def from_name(cls, name: str) -> TriggerState:
        try:
            return cls(name)
        except ValueError:
            allowed = ", ".join(state.value for state in cls)
            raise ConfigError(f"invalid trigger state '{name}' (expected one of: {allowed})") from None


_STATE_BY_VALUE = {
    0: TriggerState.RELEASE,
    1: TriggerState.PRESS,
    2: TriggerState.REPEAT,
}


@dataclass(frozen=True)
class ActionSpec:
    argv: tuple[str, ...]
    command: str

    @property
    def program(self) -> str:
        return self.argv[0]


@dataclass(frozen=True)
class Rule:
    key: KeyIdentity
    on: TriggerState
    action: ActionSpec


@dataclass(frozen=True)
class Config:
    name: str
    rules: tuple[Rule, ...] = ()

    def find(self, key: KeyIdentity, state: TriggerState) -> Rule | None:
        """Return the first rule for ``(key, state)`` in configuration order."""
        for rule in self.rules:
            if rule.key == key and rule.on is state:
                return rule
        return None


@dataclass(frozen=True)
class RawEvent:
    kind: int
    code: int
    value: int


@dataclass(frozen=True)
class KeyEvent:
    key: KeyIdentity
    state: TriggerState
    raw: RawEvent


@dataclass(frozen=True)
class OtherEvent:
    raw: RawEvent


class ChildProcess(Protocol):
    def wait(self) -> int:
        """Block until the process exits and return its exit status."""


@dataclass(frozen=True)
class PendingAction:
    label: str
    process: ChildProcess
