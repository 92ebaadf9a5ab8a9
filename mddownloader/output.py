"""Console output formatting for the CLI and the sync engine."""

import json
from typing import Any

from rich.console import Console


class OutputFormatter:
    """Formats user-facing messages with rich.

    Informational output goes to stdout, warnings and errors to stderr.
    In quiet mode only warnings and errors are shown; in JSON mode the
    human-readable messages are suppressed and results are printed with
    ``output_json``.
    """

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = Console(highlight=False)
        self.err_console = Console(stderr=True, highlight=False)

    def _silent(self) -> bool:
        return self.quiet or self.json_output

    def print(self, message: str = "") -> None:
        """Print a plain line."""
        if not self._silent():
            self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if not self._silent():
            self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        if not self._silent():
            self.console.print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        """Print a warning to stderr."""
        self.err_console.print(f"Warning: {message}", style="yellow", markup=False)

    def error(self, message: str) -> None:
        """Print an error to stderr."""
        self.err_console.print(f"Error: {message}", style="bold red", markup=False)

    def output_json(self, data: Any) -> None:
        """Print data as indented JSON."""
        self.console.print_json(json.dumps(data))
