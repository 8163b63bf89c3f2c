"""Tests for clu.system.os_type (OsType, classify, kill_command)."""

from __future__ import annotations

import enum

import pytest

from clu.system.os_type import OsType, classify, kill_command

# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

OS_NAMES: dict[str, OsType] = {
    "Windows NT": OsType.WINDOWS,
    "Windows ME": OsType.WINDOWS,
    "Windows XP": OsType.WINDOWS,
    "Windows 2003": OsType.WINDOWS,
    "win32": OsType.WINDOWS,
    "Mac OS X": OsType.DARWIN,
    "Darwin": OsType.DARWIN,
    "Linux": OsType.LINUX,
    "SunOS": OsType.SUN,
    "AiX": OsType.AIX,
    "Irix": OsType.IRIX,
    "HP-UX": OsType.HP_UX,
    "os/400": OsType.OS_400,
    "FreeBSD": OsType.FREE_BSD,
    "OpenBSD": OsType.OPEN_BSD,
    "NetBSD": OsType.NET_BSD,
    "OS/2": OsType.OS_2,
    "Solaris": OsType.SOLARIS,
    "Mips": OsType.MIPS,
    "Z/OS": OsType.ZOS,
}


class TestClassify:
    @pytest.mark.parametrize(("name", "expected"), list(OS_NAMES.items()))
    def test_known_names(self, name: str, expected: OsType) -> None:
        assert OsType.of(name) is expected

    def test_unknown(self) -> None:
        assert OsType.of("xxx") is OsType.UNKNOWN

    def test_empty_and_none(self) -> None:
        assert OsType.of("") is OsType.UNKNOWN
        assert OsType.of(None) is OsType.UNKNOWN

    def test_prefix_not_substring(self) -> None:
        """Matching is anchored at the start of the name."""
        assert OsType.of("gnu/linux") is OsType.UNKNOWN

    def test_module_alias(self) -> None:
        assert classify("Linux") is OsType.LINUX

    def test_is_str_enum(self) -> None:
        assert issubclass(OsType, enum.StrEnum)
        assert OsType.LINUX == "linux"


# ---------------------------------------------------------------------------
# Predicates and kill commands
# ---------------------------------------------------------------------------


class TestUnix:
    def test_unix_families(self) -> None:
        unix = {
            OsType.AIX,
            OsType.HP_UX,
            OsType.IRIX,
            OsType.LINUX,
            OsType.DARWIN,
            OsType.SUN,
            OsType.SOLARIS,
            OsType.FREE_BSD,
            OsType.OPEN_BSD,
            OsType.NET_BSD,
        }
        for os_type in OsType:
            assert os_type.is_unix == (os_type in unix), os_type

    def test_windows_flag(self) -> None:
        assert OsType.WINDOWS.is_windows
        assert not OsType.LINUX.is_windows


class TestKillCommand:
    def test_windows(self) -> None:
        assert kill_command(OsType.WINDOWS) == "taskkill /F /IM"

    def test_unix_like(self) -> None:
        assert kill_command(OsType.DARWIN) == "pkill -f"
        assert kill_command(OsType.LINUX) == "pkill -f"
        assert OsType.FREE_BSD.kill_command == "pkill -f"

    def test_solaris_and_unknown(self) -> None:
        assert kill_command(OsType.SOLARIS) == "killall"
        assert kill_command(OsType.UNKNOWN) == "killall"

    def test_total(self) -> None:
        for os_type in OsType:
            assert kill_command(os_type)
