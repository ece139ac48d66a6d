"""
Monolith Update - Snap Backend
Handles updates for Snap applications.
"""

import logging

from .base import BackendAdapter, BackendKind

logger = logging.getLogger(__name__)


class SnapBackend(BackendAdapter):
    """Snap applications. `snap refresh --list` contacts the store itself."""

    needs_elevation = True

    @property
    def kind(self) -> BackendKind:
        return BackendKind.SANDBOX

    def query_args(self) -> list[str]:
        return ["refresh", "--list"]

    def parse_pending(self, output: str) -> list[str]:
        names = []
        for line in output.splitlines():
            if not line.strip() or "All snaps up to date" in line:
                continue
            # Format: Name  Version  Rev  Size  Publisher  Notes
            parts = line.split()
            if parts[0] == "Name":
                continue
            names.append(parts[0])
        return names

    def apply_args(self, names: list[str]) -> list[str]:
        return ["refresh", "--"] + names

    def bulk_args(self) -> list[str]:
        return ["refresh"]
