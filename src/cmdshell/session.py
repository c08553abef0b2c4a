"""Interactive session: dispatcher, built-in help and the command loop.

Usage::

    session = Session(history_file=".rlhistory", enable_shell=True)
    session.init()
    session.add(new_command("ls", set_help("list stuff"), set_handler(do_ls)))
    session.cmd_loop()

States move ``UNINITIALIZED -> INITIALIZED -> LOOPING -> TERMINATED``;
a terminated session can loop again with ``cmd_loop`` or ``restart_loop``.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from .async_runner import DEFAULT_ASYNC_COMMAND, AsyncRunner
from .command import Command, CommandRegistry, new_command, set_handler, set_help
from .completion import CommandCompleter, CompleteFunc
from .config import DEFAULT_PROMPT, SHELL_ESCAPE, ShellConfig
from .display import Display, select_display
from .editor import LineEditor, PromptToolkitEditor
from .flags import FlagError, FlagHelpRequested
from .history import DEFAULT_HISTORY_LIMIT, HistoryStore
from .logging import ensure_logging, get_logger
from .tokenizer import shell_exec, tokenize

logger = get_logger("session")

HELP_COLUMNS = 8


class SessionState(str, Enum):
    """Lifecycle of a Session."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    LOOPING = "looping"
    TERMINATED = "terminated"


class Session:
    """Context for the command interpreter.

    Lifecycle hooks may be passed in or assigned later; ``init`` fills the
    ones left unset:

    - ``pre_loop()``: before the loop starts (skipped by ``restart_loop``)
    - ``post_loop()``: after the loop ends and history is written
    - ``pre_cmd(line)``: before a line is dispatched
    - ``post_cmd(line, stop) -> bool``: after dispatch; its result decides
      whether the loop ends
    - ``empty_line()``: the entered line was blank
    - ``default(line)``: the first word is not a registered command
    - ``complete(word, line, start, end)``: argument completion past the
      first word
    """

    def __init__(
        self,
        prompt: str = "",
        history_file: str = "",
        editor: LineEditor | None = None,
        display: Display | None = None,
        enable_shell: bool = False,
        shell_escape: str = SHELL_ESCAPE,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        pre_loop: Callable[[], None] | None = None,
        post_loop: Callable[[], None] | None = None,
        pre_cmd: Callable[[str], None] | None = None,
        post_cmd: Callable[[str, bool], bool] | None = None,
        empty_line: Callable[[], None] | None = None,
        default: Callable[[str], None] | None = None,
        complete: CompleteFunc | None = None,
    ):
        self.prompt = prompt
        self.editor = editor
        self.display = display
        self.enable_shell = enable_shell
        self.shell_escape = shell_escape

        self.pre_loop = pre_loop
        self.post_loop = post_loop
        self.pre_cmd = pre_cmd
        self.post_cmd = post_cmd
        self.empty_line = empty_line
        self.default = default
        self.complete = complete

        self.commands = CommandRegistry()
        self.history = HistoryStore(history_file, limit=history_limit)
        self.completer = CommandCompleter()
        self.async_runner: AsyncRunner | None = None
        self.restart_requested = False
        self.state = SessionState.UNINITIALIZED

    @classmethod
    def from_config(
        cls,
        config: ShellConfig,
        editor: LineEditor | None = None,
        display: Display | None = None,
        **hooks,
    ) -> Session:
        """Build and initialize a session from a ShellConfig."""
        session = cls(
            prompt=config.prompt,
            history_file=config.history_file,
            history_limit=config.history_limit,
            enable_shell=config.enable_shell,
            shell_escape=config.shell_escape,
            editor=editor,
            display=display or select_display(config.display),
            **hooks,
        )
        session.init()
        if config.enable_async:
            session.enable_async(config.async_command)
        return session

    @property
    def history_file(self) -> str:
        return self.history.path

    @history_file.setter
    def history_file(self, path: str) -> None:
        self.history.path = path

    # === Initialization ===

    def init(self) -> None:
        """Install the built-in help command and default hooks."""
        ensure_logging()

        if self.pre_loop is None:
            self.pre_loop = lambda: None
        if self.post_loop is None:
            self.post_loop = lambda: None
        if self.pre_cmd is None:
            self.pre_cmd = lambda line: None
        if self.post_cmd is None:
            self.post_cmd = lambda line, stop: stop
        if self.empty_line is None:
            self.empty_line = lambda: None
        if self.default is None:
            self.default = self._unknown_command

        if self.display is None:
            self.display = select_display()
        if self.editor is None:
            self.editor = PromptToolkitEditor()

        self.history.sink = self.editor.append_history
        self.history.report = self.display.error

        self.add(
            new_command(
                "help",
                set_help("list available commands"),
                set_handler(self.help),
            )
        )
        self.state = SessionState.INITIALIZED

    def _unknown_command(self, line: str) -> None:
        self.display.write(f"invalid command: {line}")

    def add(self, command: Command) -> None:
        """Register a command, replacing any command with the same key."""
        self.commands.add(command)

    def enable_async(self, name: str = DEFAULT_ASYNC_COMMAND) -> AsyncRunner:
        """Install the background-execution built-in under ``name``."""
        self.async_runner = AsyncRunner(self.one_cmd, name=name, report=self._report)
        self.add(self.async_runner.command())
        return self.async_runner

    def _report(self, message: str) -> None:
        if self.display is None:
            print(message)
        else:
            self.display.write(message)

    # === Completion ===

    def add_command_completer(self) -> None:
        """Snapshot command names and install the completer on the editor."""
        self.completer.delegate = self.complete
        self.completer.refresh(self.commands)
        self.editor.set_completer(self.completer)

    # === Help ===

    def help(self, command: Command, line: str) -> bool:
        """List all commands, or show usage for one command or sub-command."""
        self.display.write("")
        out = self.display.stream

        args = line.split()
        if not args:
            self.display.write("Available commands (use 'help <topic>'):")
            self.display.write("=" * 64)
            names = self.commands.names()
            for i in range(0, len(names), HELP_COLUMNS):
                self.display.write("\t".join(names[i : i + HELP_COLUMNS]))
        else:
            target = self.commands.get(args[0])
            if target is not None and len(args) > 1:
                target = target.sub_commands.get(args[1])

            if target is None:
                self.display.write("unknown command")
            elif target.help:
                target.usage(out)
            else:
                self.display.write(f"No help for {line}")

        self.display.write("")
        return False

    # === Dispatch ===

    def one_cmd(self, line: str) -> bool:
        """Execute one (already trimmed) input line.

        Returns:
            True if the handler asked the loop to stop.
        """
        if self.enable_shell and line.startswith(self.shell_escape):
            shell_exec(
                line[len(self.shell_escape) :],
                stdout=self.display.stream,
                stderr=self.display.error_stream,
            )
            return False

        parts = line.split(None, 1)
        if not parts:
            return False
        cname = parts[0]
        rest = parts[1] if len(parts) > 1 else ""

        command = self.commands.get(cname)
        if command is None:
            logger.debug("Unknown command", line=line)
            self.default(line)
            return False

        if rest:
            sub_parts = rest.split(None, 1)
            sub = command.sub_commands.get(sub_parts[0])
            if sub is not None:
                params = sub_parts[1].strip() if len(sub_parts) > 1 else ""
                return self._invoke(sub, tokenize(line)[2:], params)

        return self._invoke(command, tokenize(line)[1:], rest.strip())

    def _invoke(self, command: Command, args: list[str], params: str) -> bool:
        """Parse flags, run the handler, then reset flags on every exit path."""
        logger.debug("Dispatching", command=command.key, params=params)
        command.session = self
        try:
            try:
                command.flags.parse(args)
            except FlagHelpRequested:
                command.usage(self.display.error_stream)
            except FlagError as e:
                logger.warning("Flag parse failed", command=command.key, error=str(e))
                self.display.error(str(e))
                command.usage(self.display.error_stream)

            try:
                return command.invoke(params)
            except Exception as e:
                logger.exception("Command failed", command=command.key)
                self.display.error(f"error: {e}")
                return False
        finally:
            command.flags.reset()

    # === Command loop ===

    def set_restart_loop(self, restart: bool) -> None:
        self.restart_requested = restart

    def cmd_loop(self) -> None:
        """Prompt, read and dispatch lines until a stop signal or end of input."""
        self._run_loop(run_pre_loop=True)

    def restart_loop(self) -> None:
        """Re-enter the loop without running ``pre_loop`` again."""
        self.restart_requested = False
        self._run_loop(run_pre_loop=False)

    def _run_loop(self, run_pre_loop: bool) -> None:
        if self.state is SessionState.UNINITIALIZED:
            raise RuntimeError("Session.init() must be called before the command loop")
        if self.state is SessionState.LOOPING:
            raise RuntimeError("command loop is already running")

        if not self.prompt:
            self.prompt = DEFAULT_PROMPT

        self.add_command_completer()
        if run_pre_loop:
            self.pre_loop()
        self.history.load()

        self.state = SessionState.LOOPING
        logger.info("Command loop started", commands=len(self.commands))
        try:
            self._loop()
        finally:
            self.history.save()
            self.state = SessionState.TERMINATED
            self.post_loop()
            logger.info("Command loop stopped")

    def _loop(self) -> None:
        while True:
            try:
                result = self.editor.prompt(self.prompt)
            except EOFError:
                break
            except KeyboardInterrupt:
                self.display.write("^C")
                continue
            except OSError as e:
                logger.warning("Read failed", error=str(e))
                self.display.error(str(e))
                continue

            line = result.strip()
            if not line:
                self.empty_line()
                continue

            self.history.append(result)
            self.pre_cmd(line)

            stop = self.one_cmd(line)
            stop = self.post_cmd(line, stop)
            if stop:
                break
