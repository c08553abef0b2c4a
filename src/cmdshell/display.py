"""Terminal output collaborators.

``AnsiDisplay`` passes ANSI escape sequences straight through to the
stream. ``ConsoleDisplay`` renders through rich, which translates them for
consoles that do not understand ANSI (legacy Windows consoles).
"""

import shutil
import sys
from typing import Protocol, TextIO

from rich.console import Console
from rich.text import Text

TEXT_PADDING = 4


class Display(Protocol):
    @property
    def stream(self) -> TextIO: ...

    @property
    def error_stream(self) -> TextIO: ...

    def write(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...

    def size(self) -> tuple[int, int]:
        """Terminal (rows, cols); (0, 0) when unknown."""
        ...

    def right_justify(self, text: str) -> str: ...


class AnsiDisplay:
    """Writes text as-is; cursor movement uses ANSI escapes."""

    def __init__(self, stream: TextIO | None = None, error_stream: TextIO | None = None):
        self._stream = stream
        self._error_stream = error_stream

    # Resolved on use so pytest's capsys and redirect_stdout are honoured
    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    @property
    def error_stream(self) -> TextIO:
        return self._error_stream if self._error_stream is not None else sys.stderr

    def write(self, text: str) -> None:
        print(text, file=self.stream)

    def error(self, text: str) -> None:
        print(text, file=self.error_stream)

    def size(self) -> tuple[int, int]:
        cols, rows = shutil.get_terminal_size(fallback=(0, 0))
        return rows, cols

    def right_justify(self, text: str) -> str:
        """Move the cursor so ``text`` printed next ends near the right edge."""
        _, cols = self.size()
        if cols > 0:
            col = max(cols - (len(text) + TEXT_PADDING), 1)
            self.stream.write(f"\033[{col}G")
        return text


class ConsoleDisplay:
    """Renders through a rich Console (native console colour translation)."""

    def __init__(self, console: Console | None = None, error_console: Console | None = None):
        self.console = console or Console(highlight=False, markup=False, emoji=False)
        self.error_console = error_console or Console(
            stderr=True, highlight=False, markup=False, emoji=False
        )

    @property
    def stream(self) -> TextIO:
        return self.console.file

    @property
    def error_stream(self) -> TextIO:
        return self.error_console.file

    def write(self, text: str) -> None:
        self.console.print(Text.from_ansi(text))

    def error(self, text: str) -> None:
        self.error_console.print(Text.from_ansi(text))

    def size(self) -> tuple[int, int]:
        if not self.console.is_terminal:
            return 0, 0
        width, height = self.console.size
        return height, width

    def right_justify(self, text: str) -> str:
        _, cols = self.size()
        if cols <= 0:
            return text
        return text.rjust(cols - TEXT_PADDING)


def select_display(kind: str = "auto") -> Display:
    """Pick a display implementation: "ansi", "console" or "auto"."""
    if kind == "ansi":
        return AnsiDisplay()
    if kind == "console":
        return ConsoleDisplay()
    if kind != "auto":
        raise ValueError(f"unknown display kind: {kind!r}")
    if sys.platform == "win32":
        return ConsoleDisplay()
    return AnsiDisplay()
