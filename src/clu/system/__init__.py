"""Host classification — OS family, CPU architecture, kill commands."""

from clu.system.arch import OsArch, OsArchType
from clu.system.os_type import OsType, classify, kill_command
from clu.system.util import (
    current_arch,
    current_arch_type,
    current_os,
    kill_process_by_name,
)

__all__ = [
    "OsArch",
    "OsArchType",
    "OsType",
    "classify",
    "kill_command",
    "current_arch",
    "current_arch_type",
    "current_os",
    "kill_process_by_name",
]
