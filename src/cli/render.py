"""
Monolith Update - Terminal Rendering
"""

import click

from backends import BackendKind
from core.lock import LockError
from core.orchestrator import SessionResult
from core.risk import RiskTier

ORANGE = 208

TIER_STYLE = {
    RiskTier.CRITICAL: ("red", "🔴", "critical (security)"),
    RiskTier.HIGH: (ORANGE, "🟠", "high (system/kernel)"),
    RiskTier.SAFE: ("green", "🟢", "low priority"),
}

BANNER = r"""
    ███╗   ███╗ ██████╗ ███╗   ██╗ ██████╗ ██╗     ██╗████████╗██╗  ██╗
    ████╗ ████║██╔═══██╗████╗  ██║██╔═══██╗██║     ██║╚══██╔══╝██║  ██║
    ██╔████╔██║██║   ██║██╔██╗ ██║██║   ██║██║     ██║   ██║   ███████║
    ██║╚██╔╝██║██║   ██║██║╚██╗██║██║   ██║██║     ██║   ██║   ██╔══██║
    ██║ ╚═╝ ██║╚██████╔╝██║ ╚████║╚██████╔╝███████╗██║   ██║   ██║  ██║
    ╚═╝     ╚═╝ ╚═════╝ ╚═╝  ╚═══╝ ╚═════╝ ╚══════╝╚═╝   ╚═╝   ╚═╝  ╚═╝
"""

UNIT = {
    BackendKind.DESKTOP_SANDBOX: "apps",
}


def ok(message: str) -> None:
    click.echo(click.style(f"✅ {message}", fg="green"))


def warn(message: str) -> None:
    click.echo(click.style(f"⚠️  {message}", fg=ORANGE))


def fail(message: str) -> None:
    click.echo(click.style(f"❌ {message}", fg="red"))


def progress(message: str) -> None:
    click.echo(click.style(message, fg=ORANGE))


def branding() -> None:
    click.echo(click.style(BANNER, fg=ORANGE))
    click.echo("                    " + click.style("🗿 System Update Manager", fg="green"))
    click.echo("")


def status(report: dict) -> None:
    """Render the categorized status report."""
    click.echo("🔄 SYSTEM UPDATE STATUS")
    click.echo("======================")
    click.echo("")
    for kind, entry in report.items():
        if not entry.available:
            warn(f"{kind.label}: Not installed")
        elif entry.error:
            warn(f"{kind.label}: Error checking updates ({entry.error})")
        elif not entry.total:
            ok(f"{kind.label} packages up to date")
        else:
            click.echo(f"📦 {kind.label}: {entry.total} {UNIT.get(kind, 'packages')}")
            for tier in RiskTier:
                count = entry.tier_counts.get(tier, 0)
                if count:
                    color, icon, label = TIER_STYLE[tier]
                    click.echo(click.style(f"  {icon} {count} {label}", fg=color))
    click.echo("")


def commands() -> None:
    click.echo(click.style("📋 AVAILABLE COMMANDS:", fg="yellow"))
    click.echo(f"  {click.style('safe', fg='green')}       - Update low-risk packages only")
    click.echo(f"  {click.style('high', fg=ORANGE)}       - Update system/kernel packages")
    click.echo(f"  {click.style('critical', fg='red')}   - Update security packages only")
    click.echo(f"  {click.style('all', fg='yellow')}        - Update everything")
    click.echo(f"  {click.style('demo', fg='yellow')}       - Run simulation (no actual updates)")
    click.echo(f"  {click.style('exit', fg='yellow')}       - Exit update manager")
    click.echo("")


def result(outcome: SessionResult) -> None:
    """Render the outcome of one apply call."""
    for kind, plan in outcome.plans.items():
        if plan.bulk and plan.packages:
            click.echo(f"📦 {kind.label}: all {len(plan.packages)} pending")
        elif plan.packages:
            click.echo(f"📦 {kind.label}: {', '.join(plan.names)}")
        else:
            ok(f"No {outcome.scope.value} updates available for {kind.label}")
    for kind in sorted(outcome.skipped_backends, key=lambda k: list(BackendKind).index(k)):
        warn(f"{kind.label} not available, skipped")
    for failure in outcome.errors:
        fail(str(failure))
    click.echo("")
    if outcome.ok:
        ok("Updates complete")
    else:
        warn(f"Updates completed with {outcome.error_count} error(s)")
    reboot(outcome.reboot_required)


def reboot(required: bool, quiet_if_not: bool = False) -> None:
    if required:
        warn("Reboot required")
    elif not quiet_if_not:
        ok("No reboot needed")


def lock_error(error: LockError) -> None:
    fail(str(error))
    click.echo("Try again once the other update has finished.")
