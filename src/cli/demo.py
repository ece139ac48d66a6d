"""
Monolith Update - Simulation Mode
Walks through an update session without touching any backend.
"""

import time
from typing import Callable

import click

from cli import render

DEMO_STEPS = (
    ("📡 Checking APT repositories...", "Found 9 packages"),
    ("🔍 Analyzing package dependencies...", "Dependencies resolved"),
    ("⬇️  Downloading packages (2.3 MB)...", "Download complete"),
    ("📦 Installing safe packages...", "9 packages installed"),
    ("📦 Refreshing Snap packages...", "2 snap packages updated"),
    ("🐍 Upgrading PIP...", "PIP upgraded"),
)


def run_demo(step_delay: float = 0.05, steps: int = 20, sleep: Callable[[float], None] = time.sleep) -> None:
    """Render the simulated update session."""
    click.echo(click.style("🎬 SIMULATION MODE - No actual updates will be applied", fg="yellow"))
    for task, done in DEMO_STEPS:
        click.echo("")
        with click.progressbar(range(steps), label=click.style(task, fg=render.ORANGE), width=50) as bar:
            for _ in bar:
                sleep(step_delay)
        render.ok(done)

    click.echo("")
    box = (
        "╔════════════════════════════════════════╗",
        "║  ✅ Simulation Complete!               ║",
        "║                                        ║",
        "║  Ready to run: monolith-update safe    ║",
        "╚════════════════════════════════════════╝",
    )
    for line in box:
        click.echo(click.style(line, fg="green"))
