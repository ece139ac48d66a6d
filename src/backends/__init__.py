"""
Monolith Update - Backends Package
"""

from backends.base import (
    BACKEND_ORDER,
    ApplyFailed,
    ApplyResult,
    BackendAdapter,
    BackendError,
    BackendKind,
    BackendUnavailable,
    CommandResult,
    CommandRunner,
    PackageRef,
    QueryFailed,
    RefreshFailed,
)
from backends.apt import APTBackend
from backends.snap import SnapBackend
from backends.flatpak import FlatpakBackend
from backends.npm import NPMBackend
from backends.pip import PIPBackend

BACKEND_CLASSES = {
    BackendKind.SYSTEM: APTBackend,
    BackendKind.SANDBOX: SnapBackend,
    BackendKind.DESKTOP_SANDBOX: FlatpakBackend,
    BackendKind.NODE_GLOBAL: NPMBackend,
    BackendKind.PYTHON_GLOBAL: PIPBackend,
}

__all__ = [
    "BACKEND_ORDER",
    "BACKEND_CLASSES",
    "ApplyFailed",
    "ApplyResult",
    "BackendAdapter",
    "BackendError",
    "BackendKind",
    "BackendUnavailable",
    "CommandResult",
    "CommandRunner",
    "PackageRef",
    "QueryFailed",
    "RefreshFailed",
    "APTBackend",
    "SnapBackend",
    "FlatpakBackend",
    "NPMBackend",
    "PIPBackend",
]
