"""Commands, their configuration options, and the command registry.

A command is built by applying option functions to a fresh instance::

    ls = new_command(
        "ls",
        set_help("list stuff"),
        set_flag("n", "10", "number of entries"),
        set_bool_flag("l", False, "long format"),
        set_handler(do_ls),
    )
    ls.add_sub_command("tree", set_handler(do_tree))

Options are independent of each other; declaring the same flag twice keeps
the last declaration.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Protocol, TextIO

from .flags import FlagSet

if TYPE_CHECKING:
    from .session import Session


class Handler(Protocol):
    """Callable invoked with the command and its argument text.

    Returning a truthy value asks the session loop to stop.
    """

    def __call__(self, command: Command, line: str) -> bool | None: ...


Option = Callable[["Command"], None]


def _noop_handler(command: Command, line: str) -> bool:
    return False


class Command:
    """A named, invocable unit with help text, flags and sub-commands.

    Only one level of ``sub_commands`` is ever resolved by the dispatcher.
    Nothing stops a sub-command from holding sub-commands of its own, but
    those are unreachable from an input line.
    """

    def __init__(self, name: str):
        self.name = name
        self.alias = ""
        self.help = ""
        self.handler: Handler = _noop_handler
        self.flags = FlagSet(name)
        self.sub_commands: dict[str, Command] = {}
        self.parent: Command | None = None
        self.session: Session | None = None

    def __repr__(self) -> str:
        return f"Command({self.key!r})"

    @property
    def key(self) -> str:
        """Lookup key: the alias, which defaults to the name."""
        return self.alias or self.name

    @property
    def args(self) -> list[str]:
        """Positional tokens left over by the current flag parse."""
        return self.flags.args

    def invoke(self, line: str) -> bool:
        return bool(self.handler(self, line))

    def add_sub_command(self, name: str, *options: Option) -> Command:
        """Build a command from ``options`` and attach it as a sub-command."""
        sub = new_command(name, *options)
        sub.parent = self
        self.sub_commands[sub.key] = sub
        return sub

    def get_flag(self, name: str) -> str:
        """Current value of a flag as a string; "" if it is not declared."""
        flag = self.flags.lookup(name)
        if flag is None:
            return ""
        return str(flag)

    def get_bool_flag(self, name: str) -> bool:
        """Current value of a boolean flag; False if absent or not boolean."""
        flag = self.flags.lookup(name)
        if flag is None:
            return False
        if flag.is_bool:
            return bool(flag.value)
        return str(flag.value).lower() in ("1", "t", "true")

    def print_header(self, file: TextIO) -> None:
        if self.parent is not None:
            print(f"{self.parent.key} {self.key} -{self.help}", file=file)
        else:
            print(f"{self.key} -{self.help}", file=file)

    def usage(self, file: TextIO | None = None) -> None:
        """Print this command's flag defaults, then each sub-command's."""
        out = file or sys.stdout
        self.print_header(out)
        self.flags.print_defaults(out)

        for key in sorted(self.sub_commands):
            print(file=out)
            sub = self.sub_commands[key]
            sub.print_header(out)
            sub.flags.print_defaults(out)


def set_alias(alias: str) -> Option:
    def apply(command: Command) -> None:
        command.alias = alias

    return apply


def set_help(text: str) -> Option:
    def apply(command: Command) -> None:
        command.help = text

    return apply


def set_flag(name: str, default: str, usage: str = "") -> Option:
    def apply(command: Command) -> None:
        command.flags.add_string(name, default, usage)

    return apply


def set_bool_flag(name: str, default: bool, usage: str = "") -> Option:
    def apply(command: Command) -> None:
        command.flags.add_bool(name, default, usage)

    return apply


def set_handler(handler: Handler) -> Option:
    def apply(command: Command) -> None:
        command.handler = handler

    return apply


def new_command(name: str, *options: Option) -> Command:
    """Create a command and apply ``options`` to it in order."""
    command = Command(name)
    for option in options:
        option(command)
    if not command.alias:
        command.alias = command.name
    return command


class CommandRegistry:
    """Top-level commands keyed by alias (or name when no alias is set).

    A plain, unsynchronized mapping: commands may be added while the loop
    runs, and background invocations share it with the loop.
    """

    def __init__(self):
        self._commands: dict[str, Command] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._commands

    def __iter__(self) -> Iterator[str]:
        return iter(self._commands)

    def __len__(self) -> int:
        return len(self._commands)

    def __getitem__(self, key: str) -> Command:
        return self._commands[key]

    def add(self, command: Command) -> None:
        """Insert a command, silently replacing any with the same key."""
        self._commands[command.key] = command

    def remove(self, key: str) -> Command | None:
        return self._commands.pop(key, None)

    def get(self, key: str) -> Command | None:
        return self._commands.get(key)

    def names(self) -> list[str]:
        """All lookup keys, sorted."""
        return sorted(self._commands)
