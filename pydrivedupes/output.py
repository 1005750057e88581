"""Output formatting for CLI commands."""

import json
import sys
from typing import Any

import click

from .utils import format_size


class OutputFormatter:
    """Writes human-readable or JSON output, honouring quiet mode."""

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress informational messages
        """
        self.json_output = json_output
        self.quiet = quiet

    def print(self, message: str) -> None:
        """Print a message to stdout unconditionally."""
        click.echo(message)

    def info(self, message: str) -> None:
        """Print an informational message (suppressed in quiet/JSON mode)."""
        if not self.quiet and not self.json_output:
            click.echo(message)

    def error(self, message: str) -> None:
        """Print an error to stderr in red. Never suppressed."""
        click.secho(f"Error: {message}", fg="red", err=True)

    def output_json(self, data: Any) -> None:
        """Print data as indented JSON."""
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled list of key/value pairs."""
        if self.json_output:
            self.output_json({key: value for key, value in items})
            return
        click.echo("")
        click.secho(title, bold=True)
        click.echo("=" * len(title))
        width = max((len(key) for key, _ in items), default=0)
        for key, value in items:
            click.echo(f"{key.ljust(width)} : {value}")
        click.echo("")

    def format_size(self, size_bytes: int) -> str:
        """Format a byte count for display."""
        return format_size(size_bytes)

    @property
    def show_progress(self) -> bool:
        """Whether progress displays should be drawn."""
        return not self.quiet and not self.json_output and sys.stderr.isatty()
