"""
Monolith Update - PIP Backend
Handles updates for globally installed Python packages.
"""

import json
import logging

from .base import BackendAdapter, BackendKind

logger = logging.getLogger(__name__)


class PIPBackend(BackendAdapter):
    """Python packages visible to the configured `pip` executable."""

    @property
    def kind(self) -> BackendKind:
        return BackendKind.PYTHON_GLOBAL

    def query_args(self) -> list[str]:
        return ["list", "--outdated", "--format=json", "--disable-pip-version-check"]

    def parse_pending(self, output: str) -> list[str]:
        if not output.strip():
            return []
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            logger.warning(f"Could not parse pip list output: {e}")
            return []
        if not isinstance(data, list):
            return []
        return [item["name"] for item in data if isinstance(item, dict) and item.get("name")]

    def apply_args(self, names: list[str]) -> list[str]:
        return ["install", "--upgrade", "--disable-pip-version-check", "--"] + names
