"""
Monolith Update - Command Line Entry Point

Usage:
    monolith-update                 Show categorized status, then prompt
    monolith-update check|status    Same as above
    monolith-update count           Print the number of pending updates
    monolith-update safe|low        Update non-critical packages only
    monolith-update high|system     Update system/kernel packages
    monolith-update critical|security
                                    Update security packages only
    monolith-update all             Update everything
    monolith-update demo|sim|simulate
                                    Simulation (no actual updates)
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from cli import render
from cli.demo import run_demo
from cli.session import DEMO_KEYWORDS, SessionLoop, apply_scope
from core.config import load_settings
from core.orchestrator import build_orchestrator
from core.risk import SCOPE_ALIASES, parse_scope

logger = logging.getLogger(__name__)

STATUS_KEYWORDS = ("check", "status")
COMMANDS = STATUS_KEYWORDS + ("count",) + tuple(SCOPE_ALIASES) + DEMO_KEYWORDS

USAGE = """Usage: monolith-update [check|safe|high|critical|all|count|demo]
  monolith-update / monolith-update check  - Show categorized update status
  monolith-update safe             - Update non-critical packages only
  monolith-update high             - Update system/kernel packages
  monolith-update critical         - Update security packages only
  monolith-update all              - Update everything
  monolith-update count            - Quick count for status line
  monolith-update demo             - Simulation demo (no actual updates)"""


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure the root logger once, at process start."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("command", required=False, default="check")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to config.json (default: ~/.config/monolith-update/config.json).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable informational logging.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option("--no-prompt", is_flag=True, help="Show status and exit without prompting.")
@click.pass_context
def cli(
    ctx: click.Context,
    command: str,
    config_path: Optional[Path],
    verbose: bool,
    debug: bool,
    no_prompt: bool,
) -> None:
    """Unified, risk-aware updates for APT, Snap, Flatpak, NPM and PIP."""
    command = command.strip().lower() or "check"
    if command not in COMMANDS:
        click.echo(USAGE)
        ctx.exit(1)

    setup_logging(verbose=verbose, debug=debug)

    if command in DEMO_KEYWORDS:
        render.branding()
        run_demo()
        ctx.exit(0)

    settings = load_settings(config_path)

    if command == "count":
        orchestrator = build_orchestrator(settings)
        click.echo(str(orchestrator.pending_count()))
        ctx.exit(0)

    orchestrator = build_orchestrator(settings, on_progress=render.progress)

    if command in STATUS_KEYWORDS:
        interactive = not no_prompt and sys.stdin.isatty()
        ctx.exit(SessionLoop(orchestrator).run(interactive=interactive))

    render.branding()
    try:
        code = apply_scope(orchestrator, parse_scope(command))
    except Exception as e:
        logger.exception(f"{command} updates aborted")
        render.fail(f"Update aborted: {e}")
        code = 1
    ctx.exit(code)


def main() -> None:
    cli(prog_name="monolith-update")
