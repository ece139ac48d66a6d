"""
Monolith Update - Interactive Session
Read-dispatch-render loop over the update orchestrator.
"""

import logging
from typing import Callable

import click

from cli import render
from cli.demo import run_demo
from core.host import reboot_required
from core.lock import LockError
from core.orchestrator import UpdateOrchestrator, has_pending
from core.risk import SCOPE_ALIASES, UpdateScope, parse_scope

logger = logging.getLogger(__name__)

EXIT_KEYWORDS = ("exit", "quit", "q", "")
DEMO_KEYWORDS = ("demo", "sim", "simulate")


def prompt_command() -> str:
    """Read one command; end of input reads as an exit."""
    try:
        return click.prompt(
            click.style("🗿 update", fg=render.ORANGE),
            default="",
            show_default=False,
            prompt_suffix=" ❯ ",
        )
    except click.exceptions.Abort:
        click.echo("")
        return ""


class SessionLoop:
    """
    Interactive update session.

    Runs one command at a time on the calling thread. Apply errors are
    reported and the loop continues; only an exit keyword, empty input or
    an error the orchestrator cannot recover from ends it.
    """

    def __init__(
        self,
        orchestrator: UpdateOrchestrator,
        read_command: Callable[[], str] = prompt_command,
        demo: Callable[[], None] = run_demo,
    ):
        self.orchestrator = orchestrator
        self.read_command = read_command
        self.demo = demo
        self.exit_code = 0
        self._handlers = {keyword: self._apply for keyword in SCOPE_ALIASES}
        self._handlers.update({keyword: self._demo for keyword in DEMO_KEYWORDS})

    def show_status(self) -> dict:
        render.branding()
        report = self.orchestrator.status_report()
        render.status(report)
        return report

    def run(self, interactive: bool = True) -> int:
        """Show status, then loop over commands while updates are pending."""
        report = self.show_status()
        if not has_pending(report):
            render.ok("All systems up to date")
        elif interactive:
            self.loop()
        render.reboot(reboot_required(self.orchestrator.reboot_flag), quiet_if_not=True)
        return self.exit_code

    def loop(self) -> int:
        while True:
            render.commands()
            command = self.read_command().strip().lower()
            if command in EXIT_KEYWORDS:
                click.echo(click.style("Exiting update manager...", fg="yellow"))
                break
            handler = self._handlers.get(command)
            if handler is None:
                render.fail(f"Unknown command: {command}")
                click.echo("Try: safe, high, critical, all, demo, or exit")
                click.echo("")
                continue
            try:
                handler(command)
            except Exception as e:
                logger.exception(f"Update session aborted on '{command}'")
                render.fail(f"Update session aborted: {e}")
                self.exit_code = 1
                break
            click.echo("")
        return self.exit_code

    def _apply(self, command: str) -> None:
        self.exit_code = max(self.exit_code, apply_scope(self.orchestrator, parse_scope(command)))

    def _demo(self, command: str) -> None:
        self.demo()


def apply_scope(orchestrator: UpdateOrchestrator, scope: UpdateScope) -> int:
    """Run one apply and render it. Returns the exit code for the outcome."""
    render.progress(_SCOPE_HEADINGS[scope])
    click.echo("")
    try:
        outcome = orchestrator.apply(scope)
    except LockError as e:
        logger.error(f"{scope.value} updates not started: {e}")
        render.lock_error(e)
        return 1
    render.result(outcome)
    return outcome.exit_code


_SCOPE_HEADINGS = {
    UpdateScope.SAFE: "🟢 Updating safe packages...",
    UpdateScope.HIGH: "🟠 Updating high priority packages...",
    UpdateScope.CRITICAL: "🔴 Updating critical security packages...",
    UpdateScope.ALL: "🚀 Updating all packages...",
}
