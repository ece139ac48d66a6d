"""
Monolith Update - Session Lock
Process-level mutual exclusion for apply operations.

The lock is an advisory JSON record on disk naming the holder's PID. A
record whose PID is no longer running is stale and is replaced. A new record
is written in full beside the lock path and hard-linked into place, so the
lock path never holds a partial record and of two racing creators only one
succeeds.
"""

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)


class LockError(Exception):
    """Base class for lock acquisition failures."""


class LockHeld(LockError):
    """Another live process holds the session lock."""

    def __init__(self, holder_pid: int):
        self.holder_pid = holder_pid
        super().__init__(f"Another update session is running (pid {holder_pid})")


class ExternalLockHeld(LockError):
    """The system package manager's own lock is held by another process."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Package manager lock is held by another process: {path}")


class LockState(Enum):
    UNLOCKED = "unlocked"
    LOCKED = "locked"


@dataclass
class SessionLock:
    """Ownership record for the orchestration critical section."""
    holder_pid: int
    acquired_at: str


def process_alive(pid: int) -> bool:
    """Check whether a process with this PID exists."""
    if pid <= 0:
        return False
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but belongs to another user
        return True
    return True


class LockManager:
    """Acquires and releases the on-disk session lock."""

    def __init__(
        self,
        lock_path: Path,
        host_probe=None,
        pid_alive: Callable[[int], bool] = process_alive,
        pid: Optional[int] = None,
    ):
        """
        Initialize the lock manager.

        Args:
            lock_path: Location of the lock record.
            host_probe: Object with ``held_by_other() -> Optional[Path]``
                reporting the package manager's own lock; None skips the check.
            pid_alive: Liveness check for recorded PIDs.
            pid: PID written into new records. Defaults to this process.
        """
        self.lock_path = Path(lock_path)
        self.host_probe = host_probe
        self._pid_alive = pid_alive
        self.pid = pid if pid is not None else os.getpid()
        self.current: Optional[SessionLock] = None

    @property
    def state(self) -> LockState:
        return LockState.LOCKED if self.current else LockState.UNLOCKED

    def read(self) -> Optional[SessionLock]:
        """Read the lock record, or None if absent or unreadable."""
        try:
            data = json.loads(self.lock_path.read_text())
            return SessionLock(holder_pid=int(data["holder_pid"]), acquired_at=str(data["acquired_at"]))
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Unreadable lock record {self.lock_path}: {e}")
            return None

    def acquire(self) -> SessionLock:
        """
        Take the session lock.

        Raises:
            LockHeld: a live process holds the lock.
            ExternalLockHeld: the package manager's own lock is busy.
        """
        if self.lock_path.exists():
            existing = self.read()
            if existing and self._pid_alive(existing.holder_pid):
                raise LockHeld(existing.holder_pid)
            holder = existing.holder_pid if existing else "unknown"
            logger.warning(f"Removing stale lock {self.lock_path} (pid {holder})")
            self._unlink()

        if self.host_probe is not None:
            busy = self.host_probe.held_by_other()
            if busy:
                raise ExternalLockHeld(busy)

        lock = SessionLock(holder_pid=self.pid, acquired_at=datetime.now().isoformat())
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd, staging = tempfile.mkstemp(prefix=f".{self.lock_path.name}.", dir=self.lock_path.parent)
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(asdict(lock), f)
            os.chmod(staging, 0o644)
            os.link(staging, self.lock_path)
        except FileExistsError:
            existing = self.read()
            raise LockHeld(existing.holder_pid if existing else -1) from None
        finally:
            os.unlink(staging)
        self.current = lock
        logger.debug(f"Acquired lock {self.lock_path} (pid {self.pid})")
        return lock

    def release(self) -> None:
        """Release the lock. Safe to call when nothing is held."""
        existing = self.read()
        if existing is not None and existing.holder_pid != self.pid:
            logger.warning(
                f"Lock {self.lock_path} belongs to pid {existing.holder_pid}, leaving it"
            )
        else:
            self._unlink()
        if self.current:
            logger.debug(f"Released lock {self.lock_path}")
        self.current = None

    @contextmanager
    def held(self) -> Iterator[SessionLock]:
        """Hold the lock for the duration of a with-block."""
        lock = self.acquire()
        try:
            yield lock
        finally:
            self.release()

    def _unlink(self) -> None:
        try:
            self.lock_path.unlink()
        except FileNotFoundError:
            pass
