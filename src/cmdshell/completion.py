"""Tab-completion wiring between the session and its line editor."""

from collections.abc import Callable, Iterable

# (current word, full line, start offset, end offset) -> candidates
CompleteFunc = Callable[[str, str, int, int], list[str] | None]


class CommandCompleter:
    """Completes command names in the first word, delegates everything else.

    The name list is a sorted snapshot taken by ``refresh``; the session
    refreshes it at the start of every loop run.
    """

    def __init__(self, delegate: CompleteFunc | None = None):
        self.delegate = delegate
        self.names: list[str] = []

    def refresh(self, names: Iterable[str]) -> None:
        self.names = sorted(names)

    def match_names(self, text: str) -> list[str]:
        prefix = text.lower()
        return [n for n in self.names if n.lower().startswith(prefix)]

    def __call__(self, text: str, line: str, start: int, end: int) -> list[str]:
        if not line[:start].strip():
            return self.match_names(text)
        if self.delegate is None:
            return []
        # An empty result lets the editor fall back to its own completion
        return list(self.delegate(text, line, start, end) or [])
