"""
Monolith Update - NPM Global Backend
Handles updates for globally installed Node.js packages.
"""

import json
import logging

from .base import BackendAdapter, BackendKind, CommandResult

logger = logging.getLogger(__name__)


class NPMBackend(BackendAdapter):
    """Global npm packages (`npm -g`)."""

    @property
    def kind(self) -> BackendKind:
        return BackendKind.NODE_GLOBAL

    def query_args(self) -> list[str]:
        return ["outdated", "-g", "--depth=0", "--json"]

    def query_succeeded(self, result: CommandResult) -> bool:
        # npm outdated exits 1 when anything is outdated
        if result.returncode == 1 and result.stdout.strip().startswith("{"):
            return True
        return result.ok

    def parse_pending(self, output: str) -> list[str]:
        if not output.strip():
            return []
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            logger.warning(f"Could not parse npm outdated output: {e}")
            return []
        if not isinstance(data, dict):
            return []
        return list(data)

    def apply_args(self, names: list[str]) -> list[str]:
        return ["update", "-g", "--"] + names

    def bulk_args(self) -> list[str]:
        return ["update", "-g"]
