"""Tests for cmdshell.editor module."""

from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document

from cmdshell.editor import CallbackCompleter, PromptToolkitEditor


def _complete(completer: CallbackCompleter, text: str) -> list:
    document = Document(text, cursor_position=len(text))
    return list(completer.get_completions(document, CompleteEvent(completion_requested=True)))


class TestCallbackCompleter:
    """Tests for CallbackCompleter."""

    def test_passes_word_line_and_bounds(self):
        calls = []

        def complete(word, line, start, end):
            calls.append((word, line, start, end))
            return ["two"]

        completions = _complete(CallbackCompleter(complete), "ls t")
        assert calls == [("t", "ls t", 3, 4)]
        assert [c.text for c in completions] == ["two"]
        assert completions[0].start_position == -1

    def test_first_word_has_no_path_fallback(self):
        assert _complete(CallbackCompleter(lambda *a: []), "zz") == []

    def test_falls_back_to_paths(self, tmp_path):
        (tmp_path / "file.txt").write_text("")
        completer = CallbackCompleter(lambda *a: None)
        completions = _complete(completer, f"cat {tmp_path}/fi")
        assert completions
        assert any("le.txt" in c.text for c in completions)


class TestPromptToolkitEditor:
    """Tests for PromptToolkitEditor."""

    def test_append_history(self):
        editor = PromptToolkitEditor()
        editor.append_history("ls")
        editor.append_history("help")
        assert editor.history() == ["ls", "help"]

    def test_accepted_line_not_duplicated(self):
        editor = PromptToolkitEditor()
        editor.append_history("ls")
        editor.append_history("ls")
        assert editor.history() == ["ls"]

    def test_set_completer_before_prompt(self):
        editor = PromptToolkitEditor()
        editor.set_completer(lambda *a: [])
        editor.set_completer(None)
