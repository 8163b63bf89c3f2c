"""Terminal sessions — spawn commands, drain both pipes, wait for output to settle.

Each ``Terminal.execute()`` runs one command through ``sh -c`` (or
``cmd.exe /c`` on Windows), captures stdout and stderr on dedicated
reader threads, and returns once the process has exited and its output
has been quiet for the settle window.
"""

from clu.terminal.buffer import OutputBuffer
from clu.terminal.errors import (
    TerminalError,
    TerminalExecutionError,
    TerminalLaunchError,
    TerminalTimeoutError,
)
from clu.terminal.reader import StreamReader
from clu.terminal.session import (
    SessionResult,
    SessionState,
    Settlement,
    Terminal,
    shell_command,
)

__all__ = [
    "OutputBuffer",
    "StreamReader",
    "SessionResult",
    "SessionState",
    "Settlement",
    "Terminal",
    "shell_command",
    "TerminalError",
    "TerminalExecutionError",
    "TerminalLaunchError",
    "TerminalTimeoutError",
]
