"""
cmdshell — engine for line-oriented interactive command shells.

Usage as library:
    from cmdshell import Session, new_command, set_help, set_flag, set_handler

    session = Session(history_file=".rlhistory", enable_shell=True)
    session.init()
    session.add(new_command("ls", set_help("list stuff"), set_handler(do_ls)))
    session.cmd_loop()

Usage as CLI:
    cmdshell                   # Bare shell with the built-in commands
    cmdshell --enable-async    # ... plus the 'go' background built-in
    cmdshell -c "help"         # Dispatch one line and exit
"""

from importlib.metadata import PackageNotFoundError, version

from .async_runner import AsyncRunner, WaitGroup
from .command import (
    Command,
    CommandRegistry,
    Handler,
    Option,
    new_command,
    set_alias,
    set_bool_flag,
    set_flag,
    set_handler,
    set_help,
)
from .completion import CommandCompleter
from .config import ShellConfig, build_config, load_config_from_yaml
from .display import AnsiDisplay, ConsoleDisplay, Display, select_display
from .editor import LineEditor, PromptToolkitEditor
from .flags import Flag, FlagError, FlagHelpRequested, FlagSet
from .history import HistoryStore
from .logging import ensure_logging, get_logger, setup_logging
from .session import Session, SessionState
from .tokenizer import shell_exec, tokenize

try:
    __version__ = version("cmdshell")
except PackageNotFoundError:
    __version__ = "0.0.0.dev"  # Fallback for development without install
__all__ = [
    # Commands
    "Command",
    "CommandRegistry",
    "Handler",
    "Option",
    "new_command",
    "set_alias",
    "set_bool_flag",
    "set_flag",
    "set_handler",
    "set_help",
    # Flags
    "Flag",
    "FlagError",
    "FlagHelpRequested",
    "FlagSet",
    # Session
    "Session",
    "SessionState",
    "AsyncRunner",
    "WaitGroup",
    "CommandCompleter",
    "HistoryStore",
    "tokenize",
    "shell_exec",
    # Collaborators
    "LineEditor",
    "PromptToolkitEditor",
    "Display",
    "AnsiDisplay",
    "ConsoleDisplay",
    "select_display",
    # Configuration
    "ShellConfig",
    "build_config",
    "load_config_from_yaml",
    # Logging
    "ensure_logging",
    "get_logger",
    "setup_logging",
]
