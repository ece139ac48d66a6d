"""
Monolith Update - Configuration
Loads settings from a JSON file, falling back to defaults.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from core.host import DEFAULT_HOST_LOCKS, DEFAULT_REBOOT_FLAG

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "monolith-update" / "config.json"


def _default_log_file() -> Path:
    xdg_cache = Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))
    return xdg_cache / "monolith-update" / "update.log"


def _default_lock_file() -> Path:
    runtime_dir = os.environ.get("XDG_RUNTIME_DIR")
    base = Path(runtime_dir) if runtime_dir else Path(tempfile.gettempdir())
    return base / "monolith-update.lock"


def _default_backends() -> dict:
    return {
        "apt": {"enabled": True},
        "snap": {"enabled": True},
        "flatpak": {"enabled": True},
        "npm": {"enabled": True, "executable": "npm"},
        "pip": {"enabled": True, "executable": "pip"},
    }


@dataclass
class Settings:
    """Everything the orchestrator needs to know about its environment."""
    log_file: Path = field(default_factory=_default_log_file)
    lock_file: Path = field(default_factory=_default_lock_file)
    reboot_flag: Path = DEFAULT_REBOOT_FLAG
    host_lock_paths: list = field(default_factory=lambda: list(DEFAULT_HOST_LOCKS))
    retry_attempts: int = 3
    retry_delay: float = 2.0
    count_timeout: float = 2.0
    query_timeout: float = 120
    apply_timeout: float = 3600
    elevate_command: list = field(default_factory=lambda: ["sudo"])
    backends: dict = field(default_factory=_default_backends)
    tiered_backends: list = field(default_factory=lambda: ["apt"])

    def backend_config(self, key: str) -> dict:
        return dict(self.backends.get(key, {}))

    def backend_enabled(self, key: str) -> bool:
        return bool(self.backends.get(key, {}).get("enabled", True))

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Build settings from a parsed config file; unknown keys are ignored."""
        settings = cls()
        for key in ("log_file", "lock_file", "reboot_flag"):
            if data.get(key):
                setattr(settings, key, Path(data[key]).expanduser())
        if "host_lock_paths" in data:
            settings.host_lock_paths = [Path(p) for p in data["host_lock_paths"]]
        for key in ("count_timeout", "query_timeout", "apply_timeout"):
            if key in data:
                setattr(settings, key, float(data[key]))
        retry = data.get("retry", {})
        if "attempts" in retry:
            settings.retry_attempts = int(retry["attempts"])
        if "delay" in retry:
            settings.retry_delay = float(retry["delay"])
        if "elevate_command" in data:
            settings.elevate_command = list(data["elevate_command"])
        for key, section in data.get("backends", {}).items():
            settings.backends.setdefault(key, {}).update(section)
        if "tiered_backends" in data:
            settings.tiered_backends = list(data["tiered_backends"])
        return settings


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from file or use defaults."""
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if path.exists():
        try:
            with open(path) as f:
                data = json.load(f)
            return Settings.from_dict(data)
        except (json.JSONDecodeError, IOError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config {path}: {e}")
    elif config_path:
        logger.warning(f"Config file not found: {path}")
    return Settings()
