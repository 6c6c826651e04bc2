"""Append-only event store backed by a JSON-lines file.

The event log is the source of truth. Tasks are derived by replaying events.
The store only moves lines; deciding whether a line is a valid event is the
projection's job (see state.py).
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from .errors import StorageError
from .models import encode_event

if TYPE_CHECKING:
    from .models import CreateEvent, DeleteEvent

try:
    import fcntl
except ImportError:  # Windows: in-process lock only
    fcntl = None

logger = logging.getLogger(__name__)


class EventStore:
    """Append-only event log, one JSON object per line."""

    def __init__(self, path: Path):
        """Initialize event store.

        Args:
            path: Path to the log file. Created on first ensure()/append().
        """
        self.path = Path(path)
        self._lock = threading.Lock()

    def ensure(self) -> None:
        """Create the log (and its directory) if missing. Safe to repeat."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch(exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot create event log {self.path}") from e

    @contextmanager
    def _write_lock(self) -> Iterator[int]:
        """Hold the writer lock and yield an O_APPEND descriptor.

        The thread lock serializes writers inside this process; flock covers
        other processes sharing the same file.
        """
        with self._lock:
            fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
            try:
                if fcntl is not None:
                    fcntl.flock(fd, fcntl.LOCK_EX)
                try:
                    yield fd
                finally:
                    if fcntl is not None:
                        fcntl.flock(fd, fcntl.LOCK_UN)
            finally:
                os.close(fd)

    def _ends_mid_line(self) -> bool:
        """True if the file ends with an unterminated fragment."""
        size = self.path.stat().st_size
        if size == 0:
            return False
        with open(self.path, "rb") as f:
            f.seek(size - 1)
            return f.read(1) != b"\n"

    def _write_lines(self, lines: list[str], durable: bool) -> None:
        payload = "".join(line + "\n" for line in lines).encode("utf-8")
        try:
            self.ensure()
            with self._write_lock() as fd:
                # A crash mid-append can leave a partial last line. Start on a
                # fresh line so the fragment is not glued to our event.
                if self._ends_mid_line():
                    logger.warning(f"Event log {self.path} ends mid-line; isolating fragment")
                    payload = b"\n" + payload
                view = memoryview(payload)
                while view:
                    written = os.write(fd, view)
                    view = view[written:]
                if durable:
                    os.fsync(fd)
        except OSError as e:
            raise StorageError(f"Cannot append to event log {self.path}") from e

    def append(
        self, event: CreateEvent | DeleteEvent, durable: bool = True
    ) -> CreateEvent | DeleteEvent:
        """Append event to log. Returns the event.

        Args:
            event: Event to append
            durable: If True, fsync before returning.
        """
        self._write_lines([encode_event(event)], durable)
        return event

    def append_batch(
        self, events: list[CreateEvent | DeleteEvent], durable: bool = True
    ) -> list[CreateEvent | DeleteEvent]:
        """Append multiple events in a single locked write."""
        if not events:
            return events
        self._write_lines([encode_event(e) for e in events], durable)
        return events

    def read_all(self) -> list[str]:
        """Read all raw lines from the log, oldest first.

        Blank lines are skipped. A missing file reads as empty.
        """
        try:
            # Undecodable bytes become U+FFFD; such lines fail to parse
            # downstream instead of failing the whole read.
            with open(self.path, "r", encoding="utf-8", errors="replace", newline="\n") as f:
                return [line.rstrip("\r\n") for line in f if line.strip()]
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"Cannot read event log {self.path}") from e

    def count(self) -> int:
        """Count non-blank lines without decoding them."""
        return len(self.read_all())
