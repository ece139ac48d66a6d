"""
Monolith Update - Flatpak Backend
Handles updates for Flatpak applications.
"""

import logging

from .base import BackendAdapter, BackendKind

logger = logging.getLogger(__name__)


class FlatpakBackend(BackendAdapter):
    """Flatpak applications and runtimes."""

    has_refresh = True

    @property
    def kind(self) -> BackendKind:
        return BackendKind.DESKTOP_SANDBOX

    def query_args(self) -> list[str]:
        return ["remote-ls", "--updates", "--columns=application"]

    def parse_pending(self, output: str) -> list[str]:
        names = []
        for line in output.splitlines():
            line = line.strip()
            # Older flatpak prints a header even with --columns
            if not line or line == "Application ID":
                continue
            names.append(line.split("\t")[0])
        return names

    def refresh_args(self) -> list[str]:
        return ["update", "--appstream"]

    def apply_args(self, names: list[str]) -> list[str]:
        return ["update", "-y", "--noninteractive", "--"] + names

    def bulk_args(self) -> list[str]:
        return ["update", "-y", "--noninteractive"]
