"""Host detection and process helpers."""

from __future__ import annotations

import functools
import logging
import platform
import shlex
from typing import TYPE_CHECKING

from clu.system.arch import OsArch, OsArchType
from clu.system.os_type import OsType

if TYPE_CHECKING:
    from clu.terminal.session import SessionResult

logger = logging.getLogger(__name__)


@functools.cache
def current_os() -> OsType:
    """OS family of the running interpreter."""
    return OsType.of(platform.system())


@functools.cache
def current_arch() -> OsArch:
    return OsArch.of(platform.machine())


@functools.cache
def current_arch_type() -> OsArchType:
    return OsArchType.of(platform.machine())


def kill_process_by_name(name: str, os_type: OsType | None = None) -> SessionResult:
    """Kill every process matching ``name`` using the OS kill command.

    Runs through a throwaway terminal with break-on-error disabled, so
    "no process found" is reported in the result rather than raised.
    """
    from clu.terminal.session import Terminal

    os_type = os_type or current_os()
    target = name if os_type.is_windows else shlex.quote(name)
    command = f"{os_type.kill_command} {target}"
    logger.info("Killing processes by name: %s", command)
    return Terminal().with_break_on_error(False).execute(command)
