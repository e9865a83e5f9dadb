"""Shared utilities for Threadline CLI commands."""

from rich.console import Console

console = Console()


def _truncate(text: str, width: int = 60) -> str:
    text = text.replace("\n", " ")
    return text[:width] + "..." if len(text) > width else text
