"""Tests for cmdshell.display module."""

import io
import sys

import pytest
from rich.console import Console

from cmdshell.display import AnsiDisplay, ConsoleDisplay, select_display


class TestAnsiDisplay:
    """Tests for AnsiDisplay."""

    def test_write_and_error(self):
        out, err = io.StringIO(), io.StringIO()
        display = AnsiDisplay(out, err)
        display.write("\033[31mred\033[0m")
        display.error("oops")
        assert out.getvalue() == "\033[31mred\033[0m\n"
        assert err.getvalue() == "oops\n"

    def test_defaults_follow_sys_streams(self, capsys):
        AnsiDisplay().write("hello")
        assert capsys.readouterr().out == "hello\n"

    def test_right_justify_moves_cursor(self, monkeypatch):
        out = io.StringIO()
        display = AnsiDisplay(out)
        monkeypatch.setattr(display, "size", lambda: (24, 80))
        assert display.right_justify("done") == "done"
        assert out.getvalue() == "\033[72G"

    def test_right_justify_unknown_size(self, monkeypatch):
        out = io.StringIO()
        display = AnsiDisplay(out)
        monkeypatch.setattr(display, "size", lambda: (0, 0))
        assert display.right_justify("done") == "done"
        assert out.getvalue() == ""


class TestConsoleDisplay:
    """Tests for ConsoleDisplay."""

    def _make_display(self) -> tuple[ConsoleDisplay, io.StringIO, io.StringIO]:
        out, err = io.StringIO(), io.StringIO()
        display = ConsoleDisplay(
            Console(file=out, force_terminal=False, highlight=False),
            Console(file=err, force_terminal=False, highlight=False),
        )
        return display, out, err

    def test_ansi_translated(self):
        display, out, _ = self._make_display()
        display.write("\033[31mred\033[0m")
        assert out.getvalue() == "red\n"

    def test_error_stream(self):
        display, _, err = self._make_display()
        display.error("oops")
        assert err.getvalue() == "oops\n"
        assert display.error_stream is err

    def test_size_unknown_without_terminal(self):
        display, _, _ = self._make_display()
        assert display.size() == (0, 0)
        assert display.right_justify("x") == "x"


class TestSelectDisplay:
    """Tests for select_display."""

    def test_explicit_kinds(self):
        assert isinstance(select_display("ansi"), AnsiDisplay)
        assert isinstance(select_display("console"), ConsoleDisplay)

    def test_auto_posix(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "linux")
        assert isinstance(select_display(), AnsiDisplay)

    def test_auto_windows(self, monkeypatch):
        monkeypatch.setattr(sys, "platform", "win32")
        assert isinstance(select_display("auto"), ConsoleDisplay)

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            select_display("hologram")
