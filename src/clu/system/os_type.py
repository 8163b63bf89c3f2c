"""Operating system classification from raw platform strings."""

from __future__ import annotations

import enum


class OsType(enum.StrEnum):
    """Operating system families.

    Values are the canonical lower-case family names; classification
    itself goes through the prefix table below.
    """

    LINUX = "linux"
    DARWIN = "darwin"
    WINDOWS = "windows"
    AIX = "aix"
    IRIX = "irix"
    HP_UX = "hp-ux"
    OS_400 = "os/400"
    FREE_BSD = "freebsd"
    OPEN_BSD = "openbsd"
    NET_BSD = "netbsd"
    OS_2 = "os/2"
    SOLARIS = "solaris"
    SUN = "sunos"
    MIPS = "mips"
    ZOS = "z/os"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, os_name: str | None) -> OsType:
        """Classify a platform string such as ``platform.system()``.

        First matching prefix wins. ``None`` and unmatched input yield
        ``UNKNOWN``.
        """
        name = (os_name or "").lower()
        for os_type, prefixes in _OS_PREFIXES.items():
            if name.startswith(prefixes):
                return os_type
        return cls.UNKNOWN

    @property
    def is_unix(self) -> bool:
        return self in _UNIX_FAMILIES

    @property
    def is_windows(self) -> bool:
        return self is OsType.WINDOWS

    @property
    def kill_command(self) -> str:
        """Command prefix that kills processes by name on this family."""
        if self is OsType.WINDOWS:
            return "taskkill /F /IM"
        if self in (OsType.SOLARIS, OsType.UNKNOWN):
            return "killall"
        return "pkill -f"


# Ordered: dict preserves insertion order, first match wins
_OS_PREFIXES: dict[OsType, tuple[str, ...]] = {
    OsType.LINUX: ("linux",),
    OsType.DARWIN: ("mac", "darwin"),
    OsType.WINDOWS: ("windows", "win32"),
    OsType.AIX: ("aix",),
    OsType.IRIX: ("irix",),
    OsType.HP_UX: ("hp-ux",),
    OsType.OS_400: ("os/400",),
    OsType.FREE_BSD: ("freebsd",),
    OsType.OPEN_BSD: ("openbsd",),
    OsType.NET_BSD: ("netbsd",),
    OsType.OS_2: ("os/2",),
    OsType.SOLARIS: ("solaris",),
    OsType.SUN: ("sunos",),
    OsType.MIPS: ("mips",),
    OsType.ZOS: ("z/os",),
}

_UNIX_FAMILIES: frozenset[OsType] = frozenset(
    {
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
)


def classify(os_name: str | None) -> OsType:
    """Module-level alias for :meth:`OsType.of`."""
    return OsType.of(os_name)


def kill_command(os_type: OsType) -> str:
    return os_type.kill_command
