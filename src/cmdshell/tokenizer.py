"""Line tokenization and the shell-escape pass-through.

``tokenize`` is the quote-aware splitter the dispatcher uses before flag
parsing. ``shell_exec`` hands a ``!``-escaped line to the operating system.
"""

import shlex
import subprocess
import sys
from typing import TextIO

from .logging import get_logger

logger = get_logger("tokenizer")

# Unicode Quotation_Mark characters. Openers with a distinct closer are
# listed in _QUOTE_PAIRS; everything else closes on the same character.
QUOTE_CHARS = frozenset(
    "\"'«»‘’‚‛“”„‟"
    "‹›⹂「」『』〝〞〟"
    "﹁﹂﹃﹄＂＇｢｣"
)

_QUOTE_PAIRS = {
    "“": "”",
    "‘": "’",
    "«": "»",
    "‹": "›",
    "「": "」",
    "『": "』",
    "〝": "〞",
    "﹁": "﹂",
    "﹃": "﹄",
    "｢": "｣",
}


def tokenize(line: str) -> list[str]:
    """Split a line on whitespace, keeping quoted text together.

    Text between matching quotation marks is one token and the quote
    characters are dropped. There is no escaping inside quotes, and an
    unmatched quote runs to the end of the line.

    >>> tokenize('ls "two words" -n 3')
    ['ls', 'two words', '-n', '3']
    """
    tokens: list[str] = []
    current: list[str] = []
    in_token = False
    closing = ""

    for ch in line:
        if closing:
            if ch == closing:
                closing = ""
            else:
                current.append(ch)
        elif ch in QUOTE_CHARS:
            closing = _QUOTE_PAIRS.get(ch, ch)
            in_token = True
        elif ch.isspace():
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
        else:
            current.append(ch)
            in_token = True

    if in_token:
        tokens.append("".join(current))
    return tokens


def split_shell_line(command: str) -> list[str]:
    """Split a shell-escape line into process arguments (POSIX shell rules)."""
    return shlex.split(command)


def shell_exec(
    command: str,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int | None:
    """Run a shell-escape line through the process launcher.

    Failures are reported on ``stderr`` and never raised.

    Returns:
        The process return code, or None if nothing was run.
    """
    out = stdout or sys.stdout
    err = stderr or sys.stderr

    try:
        args = split_shell_line(command)
    except ValueError as e:
        print(f"cannot parse shell command: {e}", file=err)
        return None

    if not args:
        print("No command to exec", file=out)
        return None

    if sys.platform == "win32":
        args = ["cmd", "/C", *args]

    # Real terminals get the child attached directly; other streams get captured output.
    passthrough = _has_fileno(out) and _has_fileno(err)
    logger.debug("Running shell command", argv=args, passthrough=passthrough)
    try:
        if passthrough:
            out.flush()
            result = subprocess.run(args, stdout=out, stderr=err, text=True)
        else:
            result = subprocess.run(args, capture_output=True, text=True)
    except OSError as e:
        logger.warning("Shell command failed to start", argv=args, error=str(e))
        print(e, file=err)
        return None

    if result.stdout:
        out.write(result.stdout)
    if result.stderr:
        err.write(result.stderr)
    if result.returncode != 0:
        print(f"exit status {result.returncode}", file=err)
    return result.returncode


def _has_fileno(stream: TextIO) -> bool:
    try:
        stream.fileno()
    except (AttributeError, OSError, ValueError):
        return False
    return True
