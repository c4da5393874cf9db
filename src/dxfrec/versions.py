from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class DXFVersion(IntEnum):
    R10 = 10
    R11 = 11
    R12 = 12
    R13 = 13
    R14 = 14
    R2000 = 2000
    R2002 = 2002
    R2004 = 2004
    R2006 = 2006
    R2007 = 2007
    R2008 = 2008
    R2009 = 2009
    R2010 = 2010

    @property
    def acadver(self) -> str:
        return ACADVER_BY_VERSION[self]

    def __str__(self) -> str:
        return self.name


ACADVER_BY_VERSION = {
    DXFVersion.R10: "AC1006",
    DXFVersion.R11: "AC1009",
    DXFVersion.R12: "AC1009",
    DXFVersion.R13: "AC1012",
    DXFVersion.R14: "AC1014",
    DXFVersion.R2000: "AC1015",
    DXFVersion.R2002: "AC1015",
    DXFVersion.R2004: "AC1018",
    DXFVersion.R2006: "AC1018",
    DXFVersion.R2007: "AC1021",
    DXFVersion.R2008: "AC1021",
    DXFVersion.R2009: "AC1021",
    DXFVersion.R2010: "AC1024",
}

# Shared $ACADVER codes resolve to the latest release using them.
_VERSION_BY_ACADVER: dict[str, DXFVersion] = {}
for _version, _code in ACADVER_BY_VERSION.items():
    _VERSION_BY_ACADVER[_code] = _version


def parse_version(value: str | int | DXFVersion) -> DXFVersion:
    if isinstance(value, DXFVersion):
        return value
    if isinstance(value, int):
        try:
            return DXFVersion(value)
        except ValueError:
            raise ValueError(f"unsupported DXF version: {value}") from None
    text = str(value).strip().upper()
    if text in _VERSION_BY_ACADVER:
        return _VERSION_BY_ACADVER[text]
    if text.startswith("R"):
        text = text[1:]
    if text.isdigit():
        return parse_version(int(text))
    raise ValueError(f"unsupported DXF version: {value!r}")


@dataclass(frozen=True)
class VersionRange:
    lo: DXFVersion | None = None
    hi: DXFVersion | None = None

    def __contains__(self, version: object) -> bool:
        if not isinstance(version, int):
            return False
        if self.lo is not None and version < self.lo:
            return False
        if self.hi is not None and version > self.hi:
            return False
        return True

    def __str__(self) -> str:
        if self.lo is None and self.hi is None:
            return "any"
        if self.lo == self.hi:
            return f"=={self.lo}"
        if self.hi is None:
            return f">={self.lo}"
        if self.lo is None:
            return f"<={self.hi}"
        return f"{self.lo}..{self.hi}"


ALWAYS = VersionRange()


def since(version: DXFVersion) -> VersionRange:
    return VersionRange(lo=version)


def until(version: DXFVersion) -> VersionRange:
    return VersionRange(hi=version)


def only(version: DXFVersion) -> VersionRange:
    return VersionRange(lo=version, hi=version)


def between(lo: DXFVersion, hi: DXFVersion) -> VersionRange:
    if lo > hi:
        raise ValueError(f"empty version range: {lo}..{hi}")
    return VersionRange(lo=lo, hi=hi)
