"""Terminal error hierarchy."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from clu.terminal.session import Settlement


class TerminalError(RuntimeError):
    """Base class for all terminal failures."""


class TerminalLaunchError(TerminalError):
    """The child process could not be spawned."""

    def __init__(self, directory: Path, command: str, reason: str) -> None:
        super().__init__(f"[{directory}] [{command}] launch failed: {reason}")
        self.directory = directory
        self.command = command
        self.reason = reason


class TerminalExecutionError(TerminalError):
    """A command failed while break-on-error was enabled.

    Carries everything a caller needs to report the failure without
    going back to the terminal: directory, command, exit status, the
    settlement and the error output of that invocation.
    """

    def __init__(
        self,
        directory: Path,
        command: str,
        status: int,
        settlement: Settlement,
        error: str,
        message: str | None = None,
    ) -> None:
        super().__init__(message or f"[{directory.name}] [{command}] {error}")
        self.directory = directory
        self.command = command
        self.status = status
        self.settlement = settlement
        self.error = error


class TerminalTimeoutError(TerminalExecutionError):
    """The command outlived the configured timeout."""

    def __init__(
        self,
        directory: Path,
        command: str,
        status: int,
        settlement: Settlement,
        error: str,
        timeout_ms: int,
    ) -> None:
        super().__init__(
            directory,
            command,
            status,
            settlement,
            error,
            message=(
                f"[{directory.name}] [{command}] timed out after {timeout_ms}ms"
                + (f": {error}" if error else "")
            ),
        )
        self.timeout_ms = timeout_ms
