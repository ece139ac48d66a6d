"""
Monolith Update - Activity Log
Append-only, human-readable record of update sessions.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class ActivityLog:
    """
    Appends one ``[timestamp] message`` line per entry.

    Each entry is written with a single append so lines from independent
    sessions never interleave mid-line.
    """

    def __init__(self, path: Path, clock: Callable[[], datetime] = datetime.now):
        self.path = Path(path)
        self._clock = clock

    def append(self, message: str) -> bool:
        """
        Append an entry.

        Returns:
            True if the line was written, False if the log is not writable.
        """
        logger.info(message)
        line = f"[{self._clock().strftime(TIMESTAMP_FORMAT)}] {message}\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            logger.error(f"Failed to write activity log {self.path}: {e}")
            return False
        return True

    def tail(self, count: int = 20) -> list[str]:
        """Most recent ``count`` entries, oldest first."""
        try:
            lines = self.path.read_text(encoding="utf-8").splitlines()
        except FileNotFoundError:
            return []
        return lines[-count:]
