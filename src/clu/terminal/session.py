"""Terminal session — run shell commands as blocking calls.

A :class:`Terminal` spawns each command through the platform shell,
drains stdout and stderr on two reader threads, and returns only once
the child has exited *and* its output has stopped growing for the
settle window.  Exit and pipe drain are not atomic, so waiting on just
one of them either truncates the capture or can hang forever.
"""

from __future__ import annotations

import enum
import logging
import os
import signal
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path

from clu.config import TIMEOUT_DISABLED, TerminalConfig
from clu.system.os_type import OsType
from clu.system.util import current_os
from clu.terminal.buffer import Observer, OutputBuffer
from clu.terminal.errors import (
    TerminalExecutionError,
    TerminalLaunchError,
    TerminalTimeoutError,
)
from clu.terminal.reader import StreamReader

logger = logging.getLogger(__name__)

# Status reported for "exit 0 but wrote to stderr" with legacy_status
LEGACY_ERROR_STATUS = 2

# How long after exit the readers may stay open (a background grandchild
# still holding the pipes) before settling on quiescence alone
EOF_GRACE_MS = 1000


class SessionState(enum.Enum):
    """Lifecycle of a terminal around one ``execute`` call."""

    IDLE = "idle"
    RUNNING = "running"  # Child spawned, not yet exited
    DRAINING = "draining"  # Child exited, waiting for output to settle
    SETTLED = "settled"


class Settlement(enum.Enum):
    """How the last invocation ended."""

    CLEAN = "clean"
    COMMAND_ERROR = "command_error"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class SessionResult:
    """Outcome of a single ``execute`` call."""

    command: str
    status: int
    settlement: Settlement
    info: str = ""
    error: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.settlement is Settlement.CLEAN


def shell_command(os_type: OsType, command: str) -> list[str]:
    """Build the argv that runs ``command`` through the platform shell."""
    if os_type.is_windows:
        return ["cmd.exe", "/c", command]
    return ["sh", "-c", command]


def _log_info_line(line: str) -> None:
    logger.debug("[stdout] %s", line.rstrip("\r\n"))


def _log_error_line(line: str) -> None:
    logger.debug("[stderr] %s", line.rstrip("\r\n"))


class Terminal:
    """Blocking shell command runner with cumulative output capture.

    Configuration is read/write through properties, or chained through
    the ``with_*`` methods::

        term = Terminal().with_timeout(5_000).with_break_on_error(True)
        term.execute("make build")
        print(term.info)

    Output observers come in two flavours:

    * ``on_info_stream`` / ``on_error_stream`` see every line the moment
      a reader thread receives it.
    * ``on_info`` / ``on_error`` see lines only after an invocation has
      settled and its output was merged into the cumulative buffer.

    Calls to ``execute`` are serialized; a second caller waits for the
    first invocation to settle.
    """

    def __init__(
        self,
        directory: str | os.PathLike[str] | None = None,
        config: TerminalConfig | None = None,
    ) -> None:
        config = config or TerminalConfig()
        self._dir = Path(os.fspath(directory)) if directory is not None else Path.cwd()
        self._timeout_ms = config.timeout_ms
        self._settle_ms = config.settle_ms
        self._poll_interval_ms = config.poll_interval_ms
        self._break_on_error = config.break_on_error
        self._inherit_env = config.inherit_env
        self._env: dict[str, str] = dict(config.env)
        self._legacy_status = config.legacy_status
        self._log_output = config.log_output
        self._os_type = current_os()

        self._process: subprocess.Popen[str] | None = None
        self._status = 0
        self._settlement: Settlement | None = None
        self._state = SessionState.IDLE

        self._console = OutputBuffer()
        self._info_stream_observers: list[Observer] = []
        self._error_stream_observers: list[Observer] = []
        self._execute_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: TerminalConfig,
        directory: str | os.PathLike[str] | None = None,
    ) -> Terminal:
        return cls(directory, config)

    @classmethod
    def copy_of(cls, terminal: Terminal) -> Terminal:
        """Fresh terminal with the same configuration and last status.

        Captured output and observers are not carried over.
        """
        clone = cls(terminal.dir, terminal.config)
        clone._status = terminal.status
        clone._os_type = terminal._os_type
        return clone

    def copy(self) -> Terminal:
        return Terminal.copy_of(self)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, command: str, settle_ms: int | None = None) -> SessionResult:
        """Run ``command`` and block until it has exited and settled.

        Args:
            command: Shell command line.
            settle_ms: Override the settle window for this call only.

        Returns:
            The invocation outcome.

        Raises:
            TerminalLaunchError: The process could not be started.
            TerminalExecutionError: Non-zero exit with break-on-error.
            TerminalTimeoutError: Timeout with break-on-error.
        """
        settle = self._settle_ms if settle_ms is None else settle_ms
        if settle < 0:
            raise ValueError(f"settle_ms must be >= 0, got {settle}")
        with self._execute_lock:
            return self._execute(command, settle)

    def _execute(self, command: str, settle_ms: int) -> SessionResult:
        started = time.monotonic()
        # A fresh buffer per call: a timed-out child that keeps writing
        # must not leak into the next invocation
        transient = OutputBuffer()
        transient.add_info_observer(*self._info_stream_observers)
        transient.add_error_observer(*self._error_stream_observers)
        if self._log_output:
            transient.add_info_observer(_log_info_line)
            transient.add_error_observer(_log_error_line)

        process, readers = self._spawn(command, transient)
        self._process = process
        self._state = SessionState.RUNNING

        timed_out = self._await_settlement(
            process, readers, transient, settle_ms, started
        )

        status = process.poll() or 0
        info_lines, error_lines = transient.take()
        if (
            self._legacy_status
            and not timed_out
            and status == 0
            and error_lines
        ):
            status = LEGACY_ERROR_STATUS
        failed = status != 0
        self._merge(info_lines, error_lines, failed)

        if timed_out:
            settlement = Settlement.TIMED_OUT
        elif not failed:
            settlement = Settlement.CLEAN
        else:
            settlement = Settlement.COMMAND_ERROR

        self._status = status
        self._settlement = settlement
        self._state = SessionState.SETTLED

        error_text = "".join(error_lines)
        result = SessionResult(
            command=command,
            status=status,
            settlement=settlement,
            info="".join(info_lines if failed else info_lines + error_lines),
            error=error_text if failed else "",
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        logger.debug(
            "Command settled: %s status=%d settlement=%s in %dms",
            command,
            status,
            settlement.value,
            result.duration_ms,
        )

        if self._break_on_error and settlement is Settlement.TIMED_OUT:
            raise TerminalTimeoutError(
                self._dir, command, status, settlement, error_text, self._timeout_ms
            )
        if self._break_on_error and settlement is Settlement.COMMAND_ERROR:
            raise TerminalExecutionError(
                self._dir, command, status, settlement, error_text
            )
        return result

    def _spawn(
        self, command: str, transient: OutputBuffer
    ) -> tuple[subprocess.Popen[str], tuple[StreamReader, StreamReader]]:
        """Start the child and its two reader threads."""
        if not self._dir.is_dir():
            raise TerminalLaunchError(
                self._dir, command, "working directory does not exist"
            )

        argv = shell_command(self._os_type, command)
        try:
            process = subprocess.Popen(
                argv,
                cwd=self._dir,
                env=self._environment(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                # Own process group so kill() can take the whole tree down
                start_new_session=not self._os_type.is_windows,
            )
        except OSError as e:
            raise TerminalLaunchError(self._dir, command, str(e)) from e

        readers = (
            StreamReader(process.stdout, [transient.append_info], "stdout"),
            StreamReader(process.stderr, [transient.append_error], "stderr"),
        )
        for reader in readers:
            reader.start()

        logger.debug(
            "Terminal started: pid=%d dir=%s cmd=%s", process.pid, self._dir, command
        )
        return process, readers

    def _environment(self) -> dict[str, str]:
        """Snapshot of the child's environment; os.environ is never mutated."""
        env = dict(os.environ) if self._inherit_env else {}
        env.update(self._env)
        return env

    def _await_settlement(
        self,
        process: subprocess.Popen[str],
        readers: tuple[StreamReader, ...],
        buffer: OutputBuffer,
        settle_ms: int,
        started: float,
    ) -> bool:
        """Wait for exit AND ``settle_ms`` of output quiescence.

        Wakes on every append through ``buffer.wait_for_data`` and at
        least every ``poll_interval_ms`` to notice the exit. The quiet
        window never starts before the exit was seen, and once it has
        elapsed both readers are joined so output still in the pipes is
        delivered. The join is bounded by ``EOF_GRACE_MS`` after exit
        (a background grandchild may hold the pipes open) and by the
        timeout.

        Returns True if the timeout elapsed before the child exited.
        """
        settle = settle_ms / 1000
        poll = self._poll_interval_ms / 1000
        deadline = (
            None
            if self._timeout_ms == TIMEOUT_DISABLED
            else started + self._timeout_ms / 1000
        )

        exited_at: float | None = None
        last_count = buffer.count
        quiet_since = time.monotonic()
        while True:
            if exited_at is None and process.poll() is not None:
                exited_at = time.monotonic()
                # Output written right before exit may not be read yet
                quiet_since = max(quiet_since, exited_at)
                self._state = SessionState.DRAINING

            now = time.monotonic()
            count = buffer.count
            if count != last_count:
                last_count = count
                quiet_since = now

            if exited_at is not None and now - quiet_since >= settle:
                limit = exited_at + max(settle, EOF_GRACE_MS / 1000)
                if deadline is not None:
                    limit = min(limit, deadline)
                for reader in readers:
                    reader.join(timeout=max(limit - time.monotonic(), 0.0))
                if any(reader.is_alive() for reader in readers):
                    logger.debug(
                        "Output pipes still open after exit (pid=%d)", process.pid
                    )
                return False
            if deadline is not None and now >= deadline:
                if exited_at is not None:
                    logger.debug("Timeout reached while draining, output may be partial")
                    return False
                logger.warning(
                    "Command timed out after %dms (pid=%d)",
                    self._timeout_ms,
                    process.pid,
                )
                return True

            wait = settle - (now - quiet_since) if exited_at is not None else poll
            if deadline is not None:
                wait = min(wait, deadline - now)
            buffer.wait_for_data(last_count, timeout=max(wait, 0.0))

    def _merge(self, info: list[str], error: list[str], failed: bool) -> None:
        """Move one invocation's output into the cumulative buffer.

        Stderr of a successful command is diagnostic noise and goes to
        the info track.
        """
        self._console.append_info(*info)
        if failed:
            self._console.append_error(*error)
        else:
            self._console.append_info(*error)

    def kill(self) -> bool:
        """Kill the last child (and its process group) if still alive.

        Returns True if a kill signal was sent.
        """
        process = self._process
        if process is None or process.poll() is not None:
            return False

        try:
            if self._os_type.is_windows:
                process.kill()
            else:
                os.killpg(os.getpgid(process.pid), signal.SIGKILL)
            logger.info("Killed terminal child pid=%d", process.pid)
        except ProcessLookupError:
            logger.debug("Process already gone: %d", process.pid)
            return False

        try:
            process.wait(timeout=2)
        except subprocess.TimeoutExpired:
            logger.warning("Child pid=%d did not exit after kill", process.pid)
        return True

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def on_info(self, *observers: Observer) -> Terminal:
        """Observe info lines as they are merged into the cumulative buffer."""
        self._console.add_info_observer(*observers)
        return self

    def on_error(self, *observers: Observer) -> Terminal:
        """Observe error lines as they are merged into the cumulative buffer."""
        self._console.add_error_observer(*observers)
        return self

    def on_info_stream(self, *observers: Observer) -> Terminal:
        """Observe raw stdout lines while the command runs."""
        self._info_stream_observers.extend(observers)
        return self

    def on_error_stream(self, *observers: Observer) -> Terminal:
        """Observe raw stderr lines while the command runs."""
        self._error_stream_observers.extend(observers)
        return self

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    @property
    def info(self) -> str:
        return self._console.info_text

    @property
    def error(self) -> str:
        return self._console.error_text

    @property
    def info_lines(self) -> list[str]:
        return self._console.info_lines

    @property
    def error_lines(self) -> list[str]:
        return self._console.error_lines

    @property
    def message_count(self) -> int:
        return self._console.count

    def clear_console(self) -> Terminal:
        """Forget all captured output. Observers stay registered."""
        self._console.clear()
        return self

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def process(self) -> subprocess.Popen[str] | None:
        """Handle of the last child, None before the first execute."""
        return self._process

    @property
    def status(self) -> int:
        return self._status

    @property
    def settlement(self) -> Settlement | None:
        return self._settlement

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def os_type(self) -> OsType:
        return self._os_type

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def config(self) -> TerminalConfig:
        """Current settings as a detached config model."""
        return TerminalConfig(
            timeout_ms=self._timeout_ms,
            settle_ms=self._settle_ms,
            poll_interval_ms=self._poll_interval_ms,
            break_on_error=self._break_on_error,
            inherit_env=self._inherit_env,
            env=dict(self._env),
            legacy_status=self._legacy_status,
            log_output=self._log_output,
        )

    @property
    def dir(self) -> Path:
        return self._dir

    @dir.setter
    def dir(self, directory: str | os.PathLike[str]) -> None:
        self._dir = Path(os.fspath(directory))

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @timeout_ms.setter
    def timeout_ms(self, timeout_ms: int) -> None:
        if timeout_ms < TIMEOUT_DISABLED:
            raise ValueError(f"timeout_ms must be >= {TIMEOUT_DISABLED}, got {timeout_ms}")
        self._timeout_ms = timeout_ms

    @property
    def settle_ms(self) -> int:
        return self._settle_ms

    @settle_ms.setter
    def settle_ms(self, settle_ms: int) -> None:
        if settle_ms < 0:
            raise ValueError(f"settle_ms must be >= 0, got {settle_ms}")
        self._settle_ms = settle_ms

    @property
    def break_on_error(self) -> bool:
        return self._break_on_error

    @break_on_error.setter
    def break_on_error(self, value: bool) -> None:
        self._break_on_error = value

    @property
    def inherit_env(self) -> bool:
        return self._inherit_env

    @inherit_env.setter
    def inherit_env(self, value: bool) -> None:
        self._inherit_env = value

    @property
    def env(self) -> dict[str, str]:
        """Extra variables for the child. Returns a copy."""
        return dict(self._env)

    @property
    def legacy_status(self) -> bool:
        return self._legacy_status

    @legacy_status.setter
    def legacy_status(self, value: bool) -> None:
        self._legacy_status = value

    def with_dir(self, directory: str | os.PathLike[str]) -> Terminal:
        self.dir = directory
        return self

    def with_timeout(self, timeout_ms: int) -> Terminal:
        self.timeout_ms = timeout_ms
        return self

    def with_settle(self, settle_ms: int) -> Terminal:
        self.settle_ms = settle_ms
        return self

    def with_break_on_error(self, value: bool = True) -> Terminal:
        self.break_on_error = value
        return self

    def with_env(self, **env: str) -> Terminal:
        """Layer extra variables over the inherited environment."""
        self._env.update(env)
        return self

    def __repr__(self) -> str:
        return (
            f"Terminal(dir={str(self._dir)!r}, status={self._status}, "
            f"state={self._state.value})"
        )
