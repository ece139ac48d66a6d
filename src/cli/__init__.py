"""
Monolith Update - Command Line Package
"""

from cli.commands import cli, main

__all__ = ["cli", "main"]
