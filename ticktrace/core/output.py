"""Result and message output for the CLI."""

import json
import sys
from typing import Any, TextIO


class Output:
    """Collects result data and messages, then prints them."""

    def __init__(self, prog: str = "ticktrace"):
        self.prog = prog
        self.data: dict[str, Any] = {}
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self._printed: bool = False

    def emit(self, data: dict[str, Any]) -> None:
        """Store structured output data."""
        self.data.update(data)

    def error(self, message: str) -> None:
        """Record an error message."""
        self.errors.append(message)

    def warning(self, message: str) -> None:
        """Record a warning message."""
        self.warnings.append(message)

    @property
    def summary(self) -> str:
        """Human sentence for the tick count."""
        return f"{self.data.get('ticks', 0)} ticks occurred"

    def to_json(self) -> str:
        """Return data as JSON string."""
        return json.dumps(self.data, indent=2, default=str)

    def render(self, format: str = "plain", batch: bool = False) -> None:
        """Print the result on stdout.

        Args:
            format: Output format - "json" or "plain"
            batch: In plain format, print only the bare tick count
        """
        if self._printed:
            return
        self._printed = True

        if format == "json":
            if self.data:
                print(self.to_json())
            return

        if "ticks" not in self.data:
            return
        if batch:
            print(self.data["ticks"])
        else:
            print(self.summary)

    def render_messages(self, stream: TextIO | None = None) -> None:
        """Print warnings and errors, prefixed with the program name."""
        if stream is None:
            stream = sys.stderr
        for warning in self.warnings:
            print(f"{self.prog}: warning: {warning}", file=stream)
        for error in self.errors:
            print(f"{self.prog}: {error}", file=stream)
        self.warnings = []
        self.errors = []
