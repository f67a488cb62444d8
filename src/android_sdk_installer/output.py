"""Output sinks for installer messages."""

from __future__ import annotations

from typing import TextIO

from rich.console import Console


class StreamSink:
    """Writes lines to a text stream, such as an io.StringIO."""

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream

    def writeln(self, text: str) -> None:
        """Write one line of text."""
        self.stream.write(f"{text}\n")


class ConsoleSink:
    """Writes lines to a rich Console.

    Messages carry paths and tool output, so markup and highlighting are
    off to keep square brackets and numbers as printed.
    """

    def __init__(self, console: Console) -> None:
        self.console = console

    def writeln(self, text: str) -> None:
        """Write one line of text."""
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)
