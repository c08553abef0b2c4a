"""Per-command flag sets.

A ``FlagSet`` holds the flags one command declares. Values are parsed from
the tokenized command line on every dispatch and reset to their declared
defaults afterwards, so no value outlives the invocation that set it.

Parsing follows the conventional single-dash grammar::

    -name value    -name=value    --name=value    -name    (boolean)

Parsing stops at the first token that is not a flag, or after ``--``.
"""

from dataclasses import dataclass
from typing import TextIO

_TRUE = frozenset({"1", "t", "T", "true", "TRUE", "True"})
_FALSE = frozenset({"0", "f", "F", "false", "FALSE", "False"})


class FlagError(ValueError):
    """Raised when a command line cannot be parsed against a flag set."""


class FlagHelpRequested(FlagError):
    """Raised for -h / -help when the flag set does not declare them."""


def parse_bool(value: str) -> bool:
    """Parse a boolean flag value. Raises ValueError for anything else."""
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"invalid boolean value {value!r}")


@dataclass
class Flag:
    """One declared flag."""

    name: str
    default: str | bool
    usage: str = ""
    value: str | bool = ""

    def __post_init__(self):
        self.value = self.default

    @property
    def is_bool(self) -> bool:
        return isinstance(self.default, bool)

    def set(self, raw: str) -> None:
        self.value = parse_bool(raw) if self.is_bool else raw

    def reset(self) -> None:
        self.value = self.default

    def __str__(self) -> str:
        if self.is_bool:
            return "true" if self.value else "false"
        return str(self.value)


class FlagSet:
    """Ordered collection of flags owned by one command.

    Not synchronized: concurrent parses of the same flag set (for example
    two background invocations of one command) see each other's values.
    """

    def __init__(self, name: str):
        self.name = name
        self._flags: dict[str, Flag] = {}
        self.args: list[str] = []
        self.parsed = False

    def __contains__(self, name: str) -> bool:
        return name in self._flags

    def __iter__(self):
        return iter(self._flags.values())

    def __len__(self) -> int:
        return len(self._flags)

    def add_string(self, name: str, default: str, usage: str = "") -> Flag:
        """Declare a string flag. Redeclaring a name replaces it."""
        flag = Flag(name=name, default=default, usage=usage)
        self._flags[name] = flag
        return flag

    def add_bool(self, name: str, default: bool, usage: str = "") -> Flag:
        """Declare a boolean flag. Redeclaring a name replaces it."""
        flag = Flag(name=name, default=bool(default), usage=usage)
        self._flags[name] = flag
        return flag

    def lookup(self, name: str) -> Flag | None:
        return self._flags.get(name)

    def parse(self, arguments: list[str]) -> list[str]:
        """Parse flag tokens from the front of ``arguments``.

        Values set before a failing token stay set.

        Returns:
            The remaining positional arguments (also kept in ``self.args``).

        Raises:
            FlagError: On bad syntax, an undeclared flag, a missing value
                or an invalid boolean.
        """
        self.parsed = True
        remaining = list(arguments)
        self.args = remaining

        while remaining:
            token = remaining[0]
            if len(token) < 2 or token[0] != "-":
                break

            dashes = 1
            if token[1] == "-":
                dashes = 2
                if len(token) == 2:  # "--" terminates flags
                    del remaining[0]
                    break

            name = token[dashes:]
            if not name or name[0] in "-=":
                raise FlagError(f"bad flag syntax: {token}")
            del remaining[0]

            has_value = False
            value = ""
            if "=" in name:
                name, value = name.split("=", 1)
                has_value = True

            flag = self._flags.get(name)
            if flag is None:
                if name in ("h", "help"):
                    raise FlagHelpRequested("help requested")
                raise FlagError(f"flag provided but not defined: -{name}")

            if flag.is_bool:
                if not has_value:
                    value = "true"
                try:
                    flag.set(value)
                except ValueError:
                    raise FlagError(
                        f"invalid boolean value {value!r} for -{name}"
                    ) from None
                continue

            if not has_value:
                if not remaining:
                    raise FlagError(f"flag needs an argument: -{name}")
                value = remaining.pop(0)
            flag.set(value)

        return remaining

    def reset(self) -> None:
        """Put every flag back to its declared default."""
        for flag in self._flags.values():
            flag.reset()
        self.args = []
        self.parsed = False

    def print_defaults(self, file: TextIO) -> None:
        """Print one line per flag, in declaration order."""
        for flag in self._flags.values():
            if flag.is_bool:
                print(f"-{flag.name} {flag.usage}", file=file)
            else:
                print(f"-{flag.name}={flag.default} {flag.usage}", file=file)
