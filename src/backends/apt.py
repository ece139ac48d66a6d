"""
Monolith Update - APT Backend
Handles updates for native Debian/Ubuntu packages via APT.
"""

import re
import logging

from .base import BackendAdapter, BackendKind

logger = logging.getLogger(__name__)

# Format: package/release version arch [upgradable from: old_version]
_UPGRADABLE_LINE = re.compile(r"^([^/\s]+)/\S+")

# Keep locally modified config files without asking
DPKG_OPTIONS = [
    "-o", "Dpkg::Options::=--force-confdef",
    "-o", "Dpkg::Options::=--force-confold",
]


class APTBackend(BackendAdapter):
    """System packages. The only backend with a fast unfiltered upgrade path."""

    has_refresh = True
    needs_elevation = True
    env = {"DEBIAN_FRONTEND": "noninteractive", "LC_ALL": "C"}

    @property
    def kind(self) -> BackendKind:
        return BackendKind.SYSTEM

    @property
    def executable(self) -> str:
        return self.config.get("executable", "apt")

    def query_args(self) -> list[str]:
        return ["list", "--upgradable"]

    @property
    def mutating_executable(self) -> str:
        # apt-get has a stable CLI; `apt` is only used for listing.
        return self.config.get("apt_get", "apt-get")

    def parse_pending(self, output: str) -> list[str]:
        names = []
        for line in output.splitlines():
            line = line.strip()
            if not line or line.startswith("Listing") or line.startswith("WARNING:"):
                continue
            match = _UPGRADABLE_LINE.match(line)
            if match:
                names.append(match.group(1))
            else:
                logger.debug(f"Unrecognized apt line: {line}")
        return names

    def refresh_args(self) -> list[str]:
        return ["update"]

    def apply_args(self, names: list[str]) -> list[str]:
        return ["install", "--only-upgrade", "-y"] + DPKG_OPTIONS + ["--"] + names

    def bulk_args(self) -> list[str]:
        return ["upgrade", "-y"] + DPKG_OPTIONS
