"""Background execution of command lines.

The ``go`` built-in forks a line through the dispatcher on its own thread::

    go --start 4     arm a group that drains after every 4 forks
    go slow-command  fork (fire-and-forget if no group is armed)
    go --wait        block until every fork since the last arm/drain is done

Throttling is batch-style: once ``max_in_flight`` forks are outstanding the
next fork first waits for all of them, then the count restarts at zero.
There is no cancellation or timeout; ``wait`` blocks until the group is
done.
"""

import threading
from collections.abc import Callable

from .command import Command, new_command, set_bool_flag, set_handler, set_help
from .logging import get_logger
from .tokenizer import tokenize

logger = get_logger("async_runner")

DEFAULT_ASYNC_COMMAND = "go"


class WaitGroup:
    """Tracks a set of threads so callers can wait for all of them."""

    def __init__(self):
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for t in self._threads if t.is_alive())

    def go(self, target: Callable[[], object], name: str | None = None) -> threading.Thread:
        thread = threading.Thread(target=target, name=name, daemon=True)
        with self._lock:
            self._threads.append(thread)
        thread.start()
        return thread

    def wait(self) -> None:
        while True:
            with self._lock:
                pending = [t for t in self._threads if t.is_alive()]
                self._threads = pending
            if not pending:
                return
            for thread in pending:
                thread.join()


class AsyncRunner:
    """Forks command lines onto background threads.

    Forked lines run through ``dispatch`` concurrently with the loop and with
    each other, sharing the session's registry and each command's flag set
    without any locking.

    Args:
        dispatch: Runs one command line (normally ``Session.one_cmd``).
        name: Name the built-in is registered under; forking a line that
            starts with it is refused.
        report: Receives user-facing messages.
    """

    def __init__(
        self,
        dispatch: Callable[[str], bool],
        name: str = DEFAULT_ASYNC_COMMAND,
        report: Callable[[str], None] = print,
    ):
        self.dispatch = dispatch
        self.name = name
        self.report = report
        self.group: WaitGroup | None = None
        self.max_in_flight = 0
        self.in_flight = 0

    @property
    def armed(self) -> bool:
        return self.group is not None

    def start(self, max_in_flight: int = 0) -> None:
        """Arm a new group, replacing any previous one. 0 means unbounded."""
        self.group = WaitGroup()
        self.max_in_flight = max(max_in_flight, 0)
        self.in_flight = 0
        logger.debug("Async group armed", max_in_flight=self.max_in_flight)

    def wait(self) -> bool:
        """Block until the armed group is done, then disarm.

        Returns:
            False if nothing was armed.
        """
        if self.group is None:
            self.report("nothing to wait on")
            return False
        logger.debug("Waiting on async group", in_flight=self.in_flight)
        self.group.wait()
        self.group = None
        self.in_flight = 0
        return True

    def _run(self, line: str) -> None:
        try:
            self.dispatch(line)
        except Exception:
            logger.exception("Background command failed", line=line)

    def fork(self, line: str) -> threading.Thread | None:
        """Run ``line`` in the background, applying the drain threshold."""
        tokens = tokenize(line)
        if not tokens:
            self.report("nothing to run")
            return None
        if tokens[0] == self.name:
            self.report(f"cannot fork a fork: {line}")
            return None

        if self.group is None:
            logger.debug("Forking", line=line)
            thread = threading.Thread(target=self._run, args=(line,), daemon=True)
            thread.start()
            return thread

        if self.max_in_flight > 0 and self.in_flight >= self.max_in_flight:
            logger.debug("Draining async group", in_flight=self.in_flight)
            self.group.wait()
            self.in_flight = 0

        self.in_flight += 1
        logger.debug("Forking", line=line, in_flight=self.in_flight)
        return self.group.go(lambda: self._run(line))

    def handle(self, command: Command, line: str) -> bool:
        """Handler for the built-in: ``--start [N]``, ``--wait`` or a line."""
        if command.get_bool_flag("start"):
            count = 0
            if command.args:
                try:
                    count = int(command.args[0])
                except ValueError:
                    self.report(f"invalid count {command.args[0]!r}, running unbounded")
            self.start(count)
            return False

        if command.get_bool_flag("wait"):
            self.wait()
            return False

        self.fork(line)
        return False

    def command(self) -> Command:
        return new_command(
            self.name,
            set_help(
                f"asynchronous execution: '{self.name} <command line>', "
                f"'{self.name} --start [N]' or '{self.name} --wait'"
            ),
            set_bool_flag("start", False, "arm a wait group, optionally limited to N in flight"),
            set_bool_flag("wait", False, "wait for every forked command to finish"),
            set_handler(self.handle),
        )
