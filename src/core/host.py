"""
Monolith Update - Host State
Read-only checks against host resources the orchestrator does not own.
"""

import errno
import fcntl
import logging
import os
import subprocess
from pathlib import Path
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

DEFAULT_REBOOT_FLAG = Path("/var/run/reboot-required")
DEFAULT_HOST_LOCKS = (
    Path("/var/lib/dpkg/lock-frontend"),
    Path("/var/lib/dpkg/lock"),
)


def reboot_required(flag_path: Path = DEFAULT_REBOOT_FLAG) -> bool:
    """Check whether the host has flagged a pending reboot."""
    return Path(flag_path).exists()


class HostLockProbe:
    """
    Detects whether the system package manager's own lock is held.

    apt takes POSIX record locks on its lock files, so a non-blocking
    lockf() on the same file fails while another process holds it.
    """

    def __init__(self, paths: Iterable[Path] = DEFAULT_HOST_LOCKS):
        self.paths = [Path(p) for p in paths]

    def held_by_other(self) -> Optional[Path]:
        """Return the first lock path held by another process, or None."""
        for path in self.paths:
            if path.exists() and self._is_locked(path):
                return path
        return None

    def _is_locked(self, path: Path) -> bool:
        try:
            fd = os.open(path, os.O_RDWR)
        except PermissionError:
            return self._fuser(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Cannot open {path} to probe it, assuming free: {e}")
            return False
        try:
            fcntl.lockf(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            if e.errno in (errno.EACCES, errno.EAGAIN):
                return True
            logger.warning(f"Cannot probe lock {path}, assuming free: {e}")
            return False
        else:
            fcntl.lockf(fd, fcntl.LOCK_UN)
            return False
        finally:
            os.close(fd)

    def _fuser(self, path: Path) -> bool:
        """Fallback for unprivileged callers: is any process holding the file open."""
        try:
            result = subprocess.run(
                ["fuser", str(path)],
                capture_output=True,
                text=True,
                timeout=10,
            )
        except FileNotFoundError:
            logger.debug(f"fuser not available, cannot probe {path}")
            return False
        except subprocess.TimeoutExpired:
            logger.warning(f"fuser timed out probing {path}")
            return False
        return result.returncode == 0
