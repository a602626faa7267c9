"""Shared Rich consoles for CLI output."""

from rich.console import Console

console = Console(stderr=True)
output = Console()

__all__ = ["console", "output"]
