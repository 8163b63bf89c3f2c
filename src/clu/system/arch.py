"""CPU architecture classification from raw machine strings."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from typing import TypeVar


class OsArch(enum.StrEnum):
    AMD = "amd"
    ARM = "arm"
    PPC = "ppc"
    INTEL = "intel"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, machine: str | None) -> OsArch:
        """Classify ``platform.machine()``-style input by substring."""
        return _match(machine, _ARCH_LEXEMES, cls.UNKNOWN)


class OsArchType(enum.StrEnum):
    AT_86 = "86"
    AT_64 = "64"
    AT_7 = "arm7"
    AT_6 = "arm6"
    AT_PPC = "ppc"
    AT_UNKNOWN = "unknown"

    @classmethod
    def of(cls, machine: str | None) -> OsArchType:
        return _match(machine, _ARCH_TYPE_LEXEMES, cls.AT_UNKNOWN)


_ARCH_LEXEMES: dict[OsArch, tuple[str, ...]] = {
    OsArch.AMD: ("amd",),
    OsArch.ARM: ("arm", "aarch"),
    OsArch.PPC: ("ppc",),
    OsArch.INTEL: ("x86", "686", "386", "368", "64"),
}

_ARCH_TYPE_LEXEMES: dict[OsArchType, tuple[str, ...]] = {
    OsArchType.AT_86: ("x86", "686", "386", "368"),
    OsArchType.AT_64: ("64",),
    OsArchType.AT_7: ("arm7",),
    OsArchType.AT_6: ("arm6",),
    OsArchType.AT_PPC: ("ppc",),
}

_E = TypeVar("_E", bound=enum.Enum)


def _match(
    raw: str | None, table: Mapping[_E, tuple[str, ...]], default: _E
) -> _E:
    value = (raw or "").lower()
    for member, lexemes in table.items():
        if any(lexeme in value for lexeme in lexemes):
            return member
    return default
