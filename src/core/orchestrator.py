"""
Monolith Update - Update Orchestrator
Coordinates status reporting and tier-scoped updates across all backends.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional

from backends import (
    BACKEND_CLASSES,
    BACKEND_ORDER,
    ApplyFailed,
    ApplyResult,
    BackendAdapter,
    BackendError,
    BackendKind,
    BackendUnavailable,
    CommandRunner,
    PackageRef,
    RefreshFailed,
)
from core.activity_log import ActivityLog
from core.config import Settings
from core.host import DEFAULT_REBOOT_FLAG, HostLockProbe, reboot_required
from core.lock import LockError, LockManager
from core.retry import ExhaustedRetries, RetryPolicy
from core.risk import RiskClassifier, RiskTier, UpdateScope

logger = logging.getLogger(__name__)


class OrchestratorState(Enum):
    IDLE = "idle"
    LOCKED = "locked"
    CLASSIFYING = "classifying"
    APPLYING = "applying"
    REPORTING = "reporting"


@dataclass
class BackendStatus:
    """Pending updates for one backend, as shown by the status report."""
    backend: BackendKind
    available: bool = True
    packages: list[str] = field(default_factory=list)
    tier_counts: dict = field(default_factory=lambda: {tier: 0 for tier in RiskTier})
    error: Optional[str] = None

    @property
    def total(self) -> int:
        return len(self.packages)


@dataclass
class UpdatePlan:
    """Packages selected for one backend in one apply call."""
    backend: BackendKind
    scope: UpdateScope
    packages: list[PackageRef] = field(default_factory=list)
    bulk: bool = False

    @property
    def names(self) -> list[str]:
        return [ref.name for ref in self.packages]


@dataclass
class BackendFailure:
    backend: BackendKind
    operation: str
    message: str

    def __str__(self) -> str:
        return f"{self.backend.label} {self.operation} failed: {self.message}"


@dataclass
class SessionResult:
    """Aggregate outcome of one apply call."""
    scope: UpdateScope
    attempted_backends: set = field(default_factory=set)
    succeeded_backends: set = field(default_factory=set)
    skipped_backends: set = field(default_factory=set)
    errors: list[BackendFailure] = field(default_factory=list)
    plans: dict = field(default_factory=dict)
    reboot_required: bool = False

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def ok(self) -> bool:
        return self.error_count == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def has_pending(report: dict) -> bool:
    """Whether any backend in a status report has pending updates."""
    return any(status.total for status in report.values())


class UpdateOrchestrator:
    """
    Core engine that coordinates update discovery and application.

    Backends are always processed in BACKEND_ORDER so output and logs are
    reproducible for identical host state.
    """

    def __init__(
        self,
        backends: Iterable[BackendAdapter],
        lock_manager: LockManager,
        activity_log: ActivityLog,
        classifier: Optional[RiskClassifier] = None,
        retry_policy: Optional[RetryPolicy] = None,
        reboot_flag=DEFAULT_REBOOT_FLAG,
        tiered_backends: Iterable[BackendKind] = (BackendKind.SYSTEM,),
        count_timeout: float = 2.0,
        on_progress: Optional[Callable[[str], None]] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            backends: Enabled backend adapters, in any order.
            lock_manager: Guards apply() against concurrent sessions.
            activity_log: Append-only session log.
            classifier: Risk classifier; default rules if omitted.
            retry_policy: Policy for metadata refresh.
            reboot_flag: Host file whose presence means a reboot is pending.
            tiered_backends: Backends that take part in critical/high/safe applies.
            count_timeout: Per-backend bound for pending_count().
            on_progress: Called with a short message as each backend is processed.
        """
        order = {kind: i for i, kind in enumerate(BACKEND_ORDER)}
        self.backends = sorted(backends, key=lambda b: order[b.kind])
        self.lock_manager = lock_manager
        self.activity_log = activity_log
        self.classifier = classifier or RiskClassifier()
        self.retry_policy = retry_policy or RetryPolicy()
        self.reboot_flag = reboot_flag
        self.tiered_backends = set(tiered_backends)
        self.count_timeout = count_timeout
        self.on_progress = on_progress
        self.state = OrchestratorState.IDLE

    def _progress(self, message: str) -> None:
        if self.on_progress:
            self.on_progress(message)

    def status_report(self) -> dict:
        """
        Query and classify pending updates for every backend.

        Read-only; no lock is taken. An unavailable or failing backend is
        recorded in its BackendStatus rather than raised.

        Returns:
            Dict mapping BackendKind to BackendStatus, in processing order.
        """
        report = {}
        for backend in self.backends:
            status = BackendStatus(backend=backend.kind)
            report[backend.kind] = status
            if not backend.is_available():
                status.available = False
                continue
            self._progress(f"Checking {backend.name} packages...")
            try:
                refs = backend.query()
            except BackendUnavailable:
                status.available = False
                continue
            except BackendError as e:
                logger.error(f"Error checking {backend.name}: {e}")
                status.error = str(e)
                continue
            status.packages = [ref.name for ref in refs]
            status.tier_counts = self.classifier.tier_counts(status.packages)
        return report

    def pending_count(self) -> int:
        """Total pending updates across backends, each query bounded by count_timeout."""
        total = 0
        for backend in self.backends:
            if not backend.is_available():
                continue
            try:
                total += backend.count(self.count_timeout)
            except BackendError as e:
                logger.warning(f"Counting {backend.name} failed: {e}")
        return total

    def build_plan(self, backend: BackendAdapter, scope: UpdateScope) -> UpdatePlan:
        """Classify a fresh query result and keep the packages in ``scope``."""
        refs = backend.query()
        if scope is UpdateScope.ALL:
            return UpdatePlan(
                backend=backend.kind,
                scope=scope,
                packages=refs,
                bulk=backend.bulk_args() is not None,
            )
        tiers = self.classifier.classify_batch(ref.name for ref in refs)
        selected = [ref for ref in refs if tiers[ref.name] is scope.tier]
        return UpdatePlan(backend=backend.kind, scope=scope, packages=selected)

    def _backends_for(self, scope: UpdateScope) -> list[BackendAdapter]:
        if scope is UpdateScope.ALL:
            return list(self.backends)
        return [b for b in self.backends if b.kind in self.tiered_backends]

    def apply(self, scope: UpdateScope) -> SessionResult:
        """
        Apply the updates in ``scope`` across the relevant backends.

        Backend failures are folded into the result; nothing is retried
        except metadata refresh.

        Raises:
            LockHeld, ExternalLockHeld: another session or the package
                manager holds the lock; no work was attempted.
        """
        result = SessionResult(scope=scope)
        try:
            with self.lock_manager.held():
                self.state = OrchestratorState.LOCKED
                self.activity_log.append(f"Starting {scope.value} updates...")
                for backend in self._backends_for(scope):
                    self._apply_backend(backend, scope, result)
        except LockError as e:
            self.state = OrchestratorState.IDLE
            self.activity_log.append(f"ERROR: Could not start {scope.value} updates: {e}")
            raise
        except BaseException:
            self.state = OrchestratorState.IDLE
            raise

        self.state = OrchestratorState.REPORTING
        result.reboot_required = reboot_required(self.reboot_flag)
        if result.ok:
            self.activity_log.append("Updates completed successfully")
        else:
            self.activity_log.append(f"ERROR: Updates completed with {result.error_count} error(s)")
        self.state = OrchestratorState.IDLE
        return result

    def _apply_backend(self, backend: BackendAdapter, scope: UpdateScope, result: SessionResult) -> None:
        kind = backend.kind
        if not backend.is_available():
            result.skipped_backends.add(kind)
            self.activity_log.append(f"WARNING: {backend.name} not available, skipping")
            return

        result.attempted_backends.add(kind)
        try:
            if backend.has_refresh:
                self._progress(f"Refreshing {backend.name} metadata...")
                self.retry_policy.run(
                    backend.refresh_metadata,
                    retry_on=(RefreshFailed,),
                    description=f"{backend.name} metadata refresh",
                )
            self.state = OrchestratorState.CLASSIFYING
            plan = self.build_plan(backend, scope)
            result.plans[kind] = plan

            self.state = OrchestratorState.APPLYING
            if plan.bulk and plan.packages:
                self._progress(f"Updating all {backend.name} packages...")
                outcome = backend.apply_all()
            elif plan.bulk:
                outcome = ApplyResult(success=True, invoked=False)
            else:
                if plan.packages:
                    self._progress(f"Updating {len(plan.packages)} {backend.name} package(s)...")
                outcome = backend.apply(plan.packages)
            if not outcome.success:
                raise ApplyFailed(kind, outcome.error_message or "unknown error")
        except BackendUnavailable as e:
            result.attempted_backends.discard(kind)
            result.skipped_backends.add(kind)
            self.activity_log.append(f"WARNING: {e}, skipping")
            return
        except ExhaustedRetries as e:
            self._record_failure(result, kind, "refresh", str(e.last_error))
            return
        except BackendError as e:
            self._record_failure(result, kind, e.operation, e.detail or str(e))
            return
        finally:
            self.state = OrchestratorState.LOCKED

        result.succeeded_backends.add(kind)
        if outcome.invoked:
            self.activity_log.append(f"{backend.name} {scope.value} updates completed")
        else:
            self.activity_log.append(f"No {scope.value} updates for {backend.name}")

    def _record_failure(self, result: SessionResult, backend: BackendKind, operation: str, message: str) -> None:
        failure = BackendFailure(backend=backend, operation=operation, message=message)
        result.errors.append(failure)
        self.activity_log.append(f"ERROR: {failure}")


def build_orchestrator(
    settings: Settings,
    runner: Optional[CommandRunner] = None,
    on_progress: Optional[Callable[[str], None]] = None,
) -> UpdateOrchestrator:
    """Wire an orchestrator and its collaborators from settings."""
    backends = []
    for kind in BACKEND_ORDER:
        if not settings.backend_enabled(kind.value):
            logger.debug(f"{kind.label} disabled in config")
            continue
        backends.append(BACKEND_CLASSES[kind](
            settings.backend_config(kind.value),
            runner=runner,
            elevate_command=settings.elevate_command,
            query_timeout=settings.query_timeout,
            apply_timeout=settings.apply_timeout,
        ))

    tiered = []
    for key in settings.tiered_backends:
        try:
            tiered.append(BackendKind(key))
        except ValueError:
            logger.warning(f"Unknown backend in tiered_backends: {key}")

    return UpdateOrchestrator(
        backends=backends,
        lock_manager=LockManager(
            settings.lock_file,
            host_probe=HostLockProbe(settings.host_lock_paths),
        ),
        activity_log=ActivityLog(settings.log_file),
        retry_policy=RetryPolicy(settings.retry_attempts, settings.retry_delay),
        reboot_flag=settings.reboot_flag,
        tiered_backends=tiered,
        count_timeout=settings.count_timeout,
        on_progress=on_progress,
    )
