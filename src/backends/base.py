"""
Monolith Update - Backend Base
Abstract base class and shared types for all package-ecosystem backends.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence
import logging
import os
import shutil
import subprocess

logger = logging.getLogger(__name__)


class BackendKind(Enum):
    """Package ecosystems handled by the orchestrator, in processing order."""
    SYSTEM = "apt"
    SANDBOX = "snap"
    DESKTOP_SANDBOX = "flatpak"
    NODE_GLOBAL = "npm"
    PYTHON_GLOBAL = "pip"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    BackendKind.SYSTEM: "APT",
    BackendKind.SANDBOX: "Snap",
    BackendKind.DESKTOP_SANDBOX: "Flatpak",
    BackendKind.NODE_GLOBAL: "NPM Global",
    BackendKind.PYTHON_GLOBAL: "PIP",
}

BACKEND_ORDER = tuple(BackendKind)


@dataclass(frozen=True)
class PackageRef:
    """One pending update in one backend."""
    name: str
    backend: BackendKind

    def __post_init__(self):
        name = self.name.strip() if isinstance(self.name, str) else self.name
        if not isinstance(name, str) or not name:
            raise ValueError(f"Empty package name for {self.backend.label}")
        if any(ch.isspace() or not ch.isprintable() for ch in name):
            raise ValueError(f"Invalid package name for {self.backend.label}: {name!r}")
        object.__setattr__(self, "name", name)


@dataclass
class CommandResult:
    """Outcome of one external command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class ApplyResult:
    """Result of applying updates on one backend."""
    success: bool
    error_message: Optional[str] = None
    invoked: bool = True


class BackendError(Exception):
    """Base class for failures raised by a backend adapter."""

    operation = "operation"

    def __init__(self, backend: BackendKind, detail: str = ""):
        self.backend = backend
        self.detail = detail
        super().__init__(self.describe())

    def describe(self) -> str:
        message = f"{self.backend.label} {self.operation} failed"
        if self.detail:
            message = f"{message}: {self.detail}"
        return message


class BackendUnavailable(BackendError):
    """The backend's executable is not present on this host."""

    operation = "lookup"

    def describe(self) -> str:
        message = f"{self.backend.label} is not available"
        if self.detail:
            message = f"{message}: {self.detail}"
        return message


class QueryFailed(BackendError):
    operation = "query"


class RefreshFailed(BackendError):
    operation = "refresh"


class ApplyFailed(BackendError):
    operation = "apply"


class CommandRunner:
    """
    Runs external commands as discrete argument vectors.

    Commands are never passed through a shell, so package names reach the
    tool as literal arguments whatever characters they contain.
    """

    def run(
        self,
        args: Sequence[str],
        timeout: Optional[float] = None,
        env: Optional[dict] = None,
    ) -> CommandResult:
        """
        Run a command and capture its output.

        Raises:
            TypeError: if ``args`` is a single string instead of a sequence.
            FileNotFoundError: if the executable does not exist.
            subprocess.TimeoutExpired: if the command exceeds ``timeout``.
        """
        if isinstance(args, (str, bytes)):
            raise TypeError("Command must be a sequence of arguments, not a string")
        argv = [str(a) for a in args]
        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)
        logger.debug(f"Running: {argv}")
        completed = subprocess.run(
            argv,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=full_env,
            shell=False,
        )
        return CommandResult(completed.returncode, completed.stdout, completed.stderr)

    def which(self, executable: str) -> Optional[str]:
        return shutil.which(executable)


class BackendAdapter(ABC):
    """
    Abstract base class for package-ecosystem backends.

    Each adapter lists pending updates for its ecosystem and applies a
    given subset of them through the ecosystem's native CLI.
    """

    #: Whether refresh_metadata() does real work for this backend.
    has_refresh = False
    #: Whether mutating commands need the elevation prefix.
    needs_elevation = False
    env: dict = {}

    def __init__(
        self,
        config: Optional[dict] = None,
        runner: Optional[CommandRunner] = None,
        elevate_command: Sequence[str] = (),
        query_timeout: float = 120,
        apply_timeout: float = 3600,
    ):
        """
        Initialize the backend.

        Args:
            config: Backend section of the settings (``enabled``, ``executable``).
            runner: Command runner, replaceable in tests.
            elevate_command: Prefix for privileged commands (e.g. ``["sudo"]``).
            query_timeout: Timeout in seconds for read-only commands.
            apply_timeout: Timeout in seconds for refresh and apply commands.
        """
        self.config = config or {}
        self.runner = runner or CommandRunner()
        self.elevate_command = list(elevate_command)
        self.query_timeout = query_timeout
        self.apply_timeout = apply_timeout

    @property
    @abstractmethod
    def kind(self) -> BackendKind:
        """Which ecosystem this adapter serves."""

    @property
    def name(self) -> str:
        return self.kind.label

    @property
    def executable(self) -> str:
        return self.config.get("executable", self.kind.value)

    def is_available(self) -> bool:
        """Check if the backend's executable is on PATH."""
        return self.runner.which(self.executable) is not None

    @property
    def mutating_executable(self) -> str:
        """Executable used for refresh and apply commands."""
        return self.executable

    def _run(self, args: Sequence[str], timeout: Optional[float], mutating: bool = False) -> CommandResult:
        """Run a backend command, mapping a missing executable to BackendUnavailable."""
        executable = self.mutating_executable if mutating else self.executable
        argv = [executable] + list(args)
        if mutating and self.needs_elevation and self.elevate_command:
            # sudo resets the environment; pass it on the command line instead
            assignments = [f"{key}={value}" for key, value in self.env.items()]
            if assignments:
                argv = ["env"] + assignments + argv
            argv = self.elevate_command + argv
        try:
            result = self.runner.run(argv, timeout=timeout, env=self.env or None)
        except FileNotFoundError as e:
            raise BackendUnavailable(self.kind, str(e)) from e
        except subprocess.TimeoutExpired:
            logger.warning(f"{self.name} command timed out after {timeout}s: {argv}")
            return CommandResult(-1, "", f"timed out after {timeout}s")
        if not result.ok:
            logger.debug(f"{self.name} {args[0] if args else ''} stderr: {result.stderr}")
        return result

    def _refs(self, names: Iterable[str]) -> list[PackageRef]:
        """Build PackageRefs, skipping names that fail normalization."""
        refs = []
        seen = set()
        for raw in names:
            try:
                ref = PackageRef(raw, self.kind)
            except ValueError as e:
                logger.warning(f"Skipping package: {e}")
                continue
            if ref.name not in seen:
                seen.add(ref.name)
                refs.append(ref)
        return refs

    def _ensure_available(self) -> None:
        if not self.is_available():
            raise BackendUnavailable(self.kind)

    def query(self, timeout: Optional[float] = None) -> list[PackageRef]:
        """
        List pending updates for this backend without changing the host.

        Raises:
            BackendUnavailable: the executable is not installed.
            QueryFailed: the listing command failed.
        """
        self._ensure_available()
        result = self._run(self.query_args(), timeout or self.query_timeout)
        if not self.query_succeeded(result):
            raise QueryFailed(self.kind, result.stderr.strip() or f"exit status {result.returncode}")
        return self._refs(self.parse_pending(result.stdout))

    def count(self, timeout: float) -> int:
        """Number of pending updates, bounded by ``timeout``."""
        return len(self.query(timeout=timeout))

    def query_succeeded(self, result: CommandResult) -> bool:
        return result.ok

    @abstractmethod
    def query_args(self) -> list[str]:
        """Arguments (after the executable) that list pending updates."""

    @abstractmethod
    def parse_pending(self, output: str) -> list[str]:
        """Extract package names from the listing command's output."""

    @abstractmethod
    def apply_args(self, names: list[str]) -> list[str]:
        """Arguments (after the executable) that upgrade the named packages."""

    def refresh_args(self) -> Optional[list[str]]:
        return None

    def bulk_args(self) -> Optional[list[str]]:
        """Arguments for an unfiltered upgrade, or None to apply every queried package."""
        return None

    def refresh_metadata(self) -> None:
        """
        Refresh the backend's view of the latest available versions.

        Backends without a separate refresh step fold it into query().

        Raises:
            RefreshFailed: the refresh command failed.
        """
        args = self.refresh_args()
        if not self.has_refresh or args is None:
            return
        self._ensure_available()
        result = self._run(args, self.apply_timeout, mutating=True)
        if not result.ok:
            raise RefreshFailed(self.kind, result.stderr.strip() or f"exit status {result.returncode}")

    def apply(self, subset: Sequence[PackageRef]) -> ApplyResult:
        """
        Upgrade the given packages.

        An empty subset is a successful no-op; the tool is never invoked
        without targets.
        """
        names = [ref.name for ref in subset]
        if not names:
            return ApplyResult(success=True, invoked=False)
        for ref in subset:
            if ref.backend is not self.kind:
                raise ValueError(f"{ref.name} belongs to {ref.backend.label}, not {self.name}")
        logger.info(f"Applying {len(names)} {self.name} update(s)")
        return self._apply_command(self.apply_args(names))

    def apply_all(self) -> ApplyResult:
        """Upgrade everything this backend has pending."""
        args = self.bulk_args()
        if args is None:
            return self.apply(self.query())
        logger.info(f"Applying all {self.name} updates")
        return self._apply_command(args)

    def _apply_command(self, args: list[str]) -> ApplyResult:
        result = self._run(args, self.apply_timeout, mutating=True)
        if result.ok:
            return ApplyResult(success=True)
        return ApplyResult(
            success=False,
            error_message=result.stderr.strip() or f"exit status {result.returncode}",
        )
