"""clu — run shell commands as blocking calls with settled output capture."""

from clu.config import TerminalConfig
from clu.system import OsArch, OsArchType, OsType, current_os, kill_process_by_name
from clu.terminal import (
    SessionResult,
    SessionState,
    Settlement,
    Terminal,
    TerminalError,
    TerminalExecutionError,
    TerminalLaunchError,
    TerminalTimeoutError,
)

__version__ = "0.1.0"

__all__ = [
    "TerminalConfig",
    "OsArch",
    "OsArchType",
    "OsType",
    "current_os",
    "kill_process_by_name",
    "SessionResult",
    "SessionState",
    "Settlement",
    "Terminal",
    "TerminalError",
    "TerminalExecutionError",
    "TerminalLaunchError",
    "TerminalTimeoutError",
]
