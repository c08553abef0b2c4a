"""Line editor interface and its prompt_toolkit implementation."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import CompleteEvent, Completer, Completion, PathCompleter
from prompt_toolkit.document import Document
from prompt_toolkit.history import InMemoryHistory

from .completion import CompleteFunc


class LineEditor(Protocol):
    """What the session needs from an interactive line reader."""

    def prompt(self, text: str) -> str:
        """Read one line. Raises EOFError at end of input."""
        ...

    def append_history(self, line: str) -> None: ...

    def set_completer(self, complete: CompleteFunc | None) -> None: ...


class CallbackCompleter(Completer):
    """Adapts a ``(word, line, start, end)`` callback to prompt_toolkit.

    When the callback has nothing for a word past the first one, completion
    falls back to filesystem names.
    """

    def __init__(self, complete: CompleteFunc):
        self.complete = complete
        self._paths = PathCompleter(expanduser=True)

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        word = document.get_word_before_cursor(WORD=True)
        end = document.cursor_position
        start = end - len(word)
        line = document.text

        candidates = self.complete(word, line, start, end) or []
        for candidate in candidates:
            yield Completion(candidate, start_position=-len(word))

        if not candidates and line[:start].strip():
            path_doc = Document(word, cursor_position=len(word))
            yield from self._paths.get_completions(path_doc, complete_event)


class PromptToolkitEditor:
    """LineEditor backed by a prompt_toolkit PromptSession.

    The PromptSession is created on the first prompt, so building an editor
    (and seeding its history) does not need a terminal.
    """

    def __init__(self, session: PromptSession | None = None):
        self._session = session
        self._history = session.history if session is not None else InMemoryHistory()
        self._completer: Completer | None = None

    @property
    def session(self) -> PromptSession:
        if self._session is None:
            self._session = PromptSession(
                history=self._history,
                completer=self._completer,
                complete_while_typing=False,
            )
        return self._session

    def prompt(self, text: str) -> str:
        return self.session.prompt(text)

    def append_history(self, line: str) -> None:
        # PromptSession already records accepted input
        strings = self._history.get_strings()
        if strings and strings[-1] == line:
            return
        self._history.append_string(line)

    def history(self) -> list[str]:
        return self._history.get_strings()

    def set_completer(self, complete: CompleteFunc | None) -> None:
        self._completer = CallbackCompleter(complete) if complete else None
        if self._session is not None:
            self._session.completer = self._completer
