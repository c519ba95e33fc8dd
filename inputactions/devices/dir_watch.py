"""Directory-change notifications for device hot-plug, built on watchdog's inotify wrapper.

Only IN_CREATE, IN_ATTRIB and IN_MOVED_TO are requested from the kernel, so
writes to device nodes (LED updates and the like) never wake the watcher.
Unread notifications stay in the kernel's bounded inotify queue while a
device session is running.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator

from watchdog.observers.inotify_c import Inotify, InotifyConstants, InotifyEvent

from inputactions.core.errors import WatchInitError
from inputactions.devices.base import DirectoryEvent, DirectoryEventKind

LOGGER = logging.getLogger(__name__)

WATCH_MASK = InotifyConstants.IN_CREATE | InotifyConstants.IN_ATTRIB | InotifyConstants.IN_MOVED_TO


def _kind_of(event: InotifyEvent) -> DirectoryEventKind | None:
    if event.is_directory:
        return None
    if event.is_create:
        return DirectoryEventKind.CREATE
    if event.is_attrib:
        return DirectoryEventKind.ATTRIB
    if event.is_moved_to:
        return DirectoryEventKind.MOVED_TO
    return None


def translate_events(events: list[InotifyEvent]) -> list[DirectoryEvent]:
    """Keep the first relevant event per node name, in arrival order."""
    translated: list[DirectoryEvent] = []
    seen: set[str] = set()
    for event in events:
        kind = _kind_of(event)
        if kind is None or not event.name:
            continue
        name = os.fsdecode(event.name)
        if name in seen:
            continue
        seen.add(name)
        translated.append(DirectoryEvent(kind=kind, name=name))
    return translated


def _open_inotify(directory: str) -> Inotify:
    return Inotify(os.fsencode(directory), recursive=False, event_mask=WATCH_MASK)


class DirectoryWatch:
    def __init__(self, directory: str, *, inotify_factory: Callable[[str], Inotify] = _open_inotify) -> None:
        self.directory = directory
        self._inotify_factory = inotify_factory
        self._inotify: Inotify | None = None

    def start(self) -> DirectoryWatch:
        if not os.path.isdir(self.directory):
            raise WatchInitError(f"Cannot watch {self.directory}: not a directory")
        try:
            self._inotify = self._inotify_factory(self.directory)
        except OSError as exc:
            raise WatchInitError(f"Cannot watch {self.directory}: {exc}") from exc
        LOGGER.debug("Watching %s for device nodes", self.directory)
        return self

    def stop(self) -> None:
        if self._inotify is None:
            return
        self._inotify.close()
        self._inotify = None

    def __enter__(self) -> DirectoryWatch:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __iter__(self) -> Iterator[DirectoryEvent]:
        if self._inotify is None:
            raise WatchInitError(f"Watch on {self.directory} was not started")
        while self._inotify is not None:
            try:
                events = self._inotify.read_events()
            except OSError as exc:
                raise WatchInitError(f"Lost watch on {self.directory}: {exc}") from exc
            yield from translate_events(events)
