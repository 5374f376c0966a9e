import os
import enum
import time
import queue
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler


class EventKind(enum.Enum):
    NOTICE_WRITE = "notice_write"
    NOTICE_REMOVE = "notice_remove"
    CREATE = "create"
    WRITE = "write"
    CHMOD = "chmod"
    REMOVE = "remove"
    RENAME = "rename"
    RESCAN = "rescan"
    ERROR = "error"


@dataclass(frozen=True)
class DebouncedEvent:
    kind: EventKind
    path: Optional[str] = None
    dest_path: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def paths(self) -> Tuple[str, ...]:
        return tuple(p for p in (self.path, self.dest_path) if p)


@dataclass
class _Pending:
    kind: EventKind
    deadline: float
    src_path: Optional[str] = None


def _merge(old: EventKind, new: EventKind) -> Optional[EventKind]:
    """Kind a path ends up with when `new` follows a still-pending `old`.

    None means the two cancel out and nothing is reported.
    """
    if old is EventKind.CREATE:
        if new in (EventKind.WRITE, EventKind.CHMOD):
            return EventKind.CREATE
        if new is EventKind.REMOVE:
            return None
    if old is EventKind.REMOVE and new is EventKind.CREATE:
        return EventKind.WRITE
    if old is EventKind.WRITE and new is EventKind.CHMOD:
        return EventKind.WRITE
    return new


class Debouncer:
    """Coalesce raw filesystem events per path and release them into a queue.

    A path is released once no new event has arrived for it during `delay`
    seconds. Releases happen on a background thread started with `start()`;
    `flush_due()` can also be driven directly.
    """

    def __init__(
        self,
        events: "queue.Queue[DebouncedEvent]",
        delay: float,
        notices: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.events = events
        self.delay = delay
        self.notices = notices
        self.clock = clock
        self._lock = threading.Lock()
        self._pending: Dict[str, _Pending] = {}
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def add(self, kind: EventKind, path: str) -> None:
        with self._lock:
            now = self.clock()
            pending = self._pending.pop(path, None)
            if pending is None:
                if self.notices and kind is EventKind.WRITE:
                    self.events.put(DebouncedEvent(EventKind.NOTICE_WRITE, path))
                elif self.notices and kind is EventKind.REMOVE:
                    self.events.put(DebouncedEvent(EventKind.NOTICE_REMOVE, path))
                self._pending[path] = _Pending(kind, now + self.delay)
                return

            if pending.kind is EventKind.RENAME:
                # Keep the rename, the later change still lands on the new path
                pending.deadline = now + self.delay
                self._pending[path] = pending
                return

            merged = _merge(pending.kind, kind)
            if merged is None:
                logging.debug(f"Changes cancelled out: {path}")
                return
            self._pending[path] = _Pending(merged, now + self.delay)

    def rename(self, src_path: str, dest_path: str) -> None:
        with self._lock:
            now = self.clock()
            pending = self._pending.pop(src_path, None)
            self._pending.pop(dest_path, None)
            if pending is not None and pending.kind is EventKind.CREATE:
                self._pending[dest_path] = _Pending(EventKind.CREATE, now + self.delay)
                return
            # Chained renames (a -> b -> c) report the original source
            if pending is not None and pending.kind is EventKind.RENAME:
                src_path = pending.src_path or src_path
            self._pending[dest_path] = _Pending(
                EventKind.RENAME, now + self.delay, src_path=src_path
            )

    def error(self, exc: BaseException, path: Optional[str] = None) -> None:
        self.events.put(DebouncedEvent(EventKind.ERROR, path, error=exc))

    def flush_due(self, now: Optional[float] = None) -> int:
        """Release every path that has been quiet long enough; returns the count."""
        if now is None:
            now = self.clock()
        released = []
        with self._lock:
            for path, pending in list(self._pending.items()):
                if pending.deadline <= now:
                    del self._pending[path]
                    released.append((path, pending))
        for path, pending in released:
            if pending.kind is EventKind.RENAME:
                self.events.put(
                    DebouncedEvent(EventKind.RENAME, pending.src_path, dest_path=path)
                )
            else:
                self.events.put(DebouncedEvent(pending.kind, path))
        return len(released)

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._pending)

    def _run(self) -> None:
        tick = min(max(self.delay / 4, 0.01), 0.1)
        while not self._stopped.wait(tick):
            self.flush_due()

    def start(self) -> None:
        self._stopped.clear()
        self._thread = threading.Thread(
            target=self._run, name="relaunch-debouncer", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None


class ChangeHandler(FileSystemEventHandler):
    """Feed watchdog events into a Debouncer."""

    def __init__(self, debouncer: Debouncer) -> None:
        super().__init__()
        self.debouncer = debouncer

    def _record(self, kind: EventKind, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        try:
            self.debouncer.add(kind, os.fsdecode(event.src_path))
        except Exception as e:
            logging.debug(f"Could not record {event!r}: {e}")
            self.debouncer.error(e, None)

    def on_created(self, event: FileSystemEvent) -> None:
        self._record(EventKind.CREATE, event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._record(EventKind.WRITE, event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._record(EventKind.REMOVE, event)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        try:
            dest = getattr(event, "dest_path", None)
            if not dest:
                raise ValueError(f"move event without destination: {event.src_path!r}")
            self.debouncer.rename(os.fsdecode(event.src_path), os.fsdecode(dest))
        except Exception as e:
            logging.debug(f"Could not record {event!r}: {e}")
            self.debouncer.error(e, None)
