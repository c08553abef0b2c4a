"""Line history persistence.

The history file is plain text, one entry per line. On first load the
configured path is looked up in the current directory, then under
``$HOME``; if it is found under ``$HOME`` that location is kept for every
later load and save. Pointing the store at a new path loads that file on
the next ``load``.
"""

import os
import sys
from collections.abc import Callable
from pathlib import Path

from .logging import get_logger

logger = get_logger("history")

DEFAULT_HISTORY_LIMIT = 1000


def _report_stderr(message: str) -> None:
    print(message, file=sys.stderr)


def home_dir() -> Path:
    """Home directory from the environment, falling back to the user database."""
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE")
    return Path(home) if home else Path.home()


class HistoryStore:
    """Accumulates entered lines and mirrors them into a line editor.

    Args:
        path: Configured history file; "" disables persistence.
        sink: Called with each entry loaded or appended (usually the
            line editor's ``append_history``).
        limit: Keep only the newest ``limit`` entries when saving; 0 keeps all.
        report: Receives user-facing messages for read/write failures.
    """

    def __init__(
        self,
        path: str | os.PathLike = "",
        sink: Callable[[str], None] | None = None,
        limit: int = DEFAULT_HISTORY_LIMIT,
        report: Callable[[str], None] | None = None,
    ):
        self._path = str(path) if path else ""
        self.sink = sink
        self.limit = limit
        self.report = report or _report_stderr
        self.entries: list[str] = []
        self.loaded = False
        self._resolved = False

    @property
    def path(self) -> str:
        return self._path

    @path.setter
    def path(self, value: str | os.PathLike) -> None:
        self._path = str(value) if value else ""
        self._resolved = False
        self.loaded = False

    def resolve(self) -> Path | None:
        """Resolve the history path once: current directory, then $HOME."""
        if not self.path:
            return None
        if self._resolved:
            return Path(self.path)

        self._resolved = True
        local = Path(self.path)
        if local.exists():
            return local

        homed = home_dir() / self.path
        if homed.exists():
            self._path = str(homed)
            return homed

        # Nothing on disk yet; the configured path is where it will be written
        return local

    def load(self) -> int:
        """Read history from disk, once per store. A missing file is not an error.

        Returns:
            Number of entries loaded.
        """
        if self.loaded:
            return 0
        self.loaded = True

        path = self.resolve()
        if path is None or not path.exists():
            return 0

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read history", path=str(path), error=str(e))
            self.report(f"cannot read history file {path}: {e}")
            return 0

        count = 0
        for line in text.splitlines():
            if line:
                self.append(line)
                count += 1
        logger.debug("History loaded", path=str(path), entries=count)
        return count

    def append(self, line: str) -> None:
        self.entries.append(line)
        if self.limit > 0 and len(self.entries) > self.limit:
            del self.entries[: -self.limit]
        if self.sink is not None:
            self.sink(line)

    def save(self) -> bool:
        """Overwrite the history file with the accumulated entries."""
        if not self.path:
            return False

        path = Path(self.path)
        entries = self.entries[-self.limit :] if self.limit > 0 else self.entries
        try:
            with open(path, "w", encoding="utf-8") as f:
                for entry in entries:
                    f.write(entry + "\n")
        except OSError as e:
            logger.warning("Failed to write history", path=str(path), error=str(e))
            self.report(f"Error writing history file: {e}")
            return False

        logger.debug("History saved", path=str(path), entries=len(entries))
        return True
