"""Device and directory-watch interfaces."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from inputactions.core.model import RawEvent


class DirectoryEventKind(Enum):
    CREATE = "create"
    ATTRIB = "attrib"
    MOVED_TO = "moved_to"


@dataclass(frozen=True)
class DirectoryEvent:
    kind: DirectoryEventKind
    name: str | None


class InputSource(Protocol):
    path: str

    @property
    def name(self) -> str | None:
        """Human-readable device name, or None when the device reports none."""

    def read_batches(self) -> Iterator[list[RawEvent]]:
        """Yield batches of events until the device fails with DeviceReadError."""

    def close(self) -> None:
        ...


class DirectoryWatcher(Protocol):
    def __enter__(self) -> DirectoryWatcher:
        ...

    def __exit__(self, *exc_info: object) -> None:
        ...

    def __iter__(self) -> Iterator[DirectoryEvent]:
        """Block for and yield directory events forever."""


class DeviceBackend(Protocol):
    def enumerate(self) -> Iterator[InputSource]:
        """Open every input device currently present, lazily, in one pass."""

    def open(self, path: str) -> InputSource:
        """Open a device node or raise DeviceOpenError."""

    def watch(self, directory: str) -> DirectoryWatcher:
        """Start watching ``directory`` or raise WatchInitError."""
