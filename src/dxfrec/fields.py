from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from .errors import Malformed
from .versions import ALWAYS, VersionRange


class Kind(str, Enum):
    INT = "int"
    SHORT = "short"
    FLAGS = "flags"
    HANDLE = "handle"
    FLOAT = "float"
    ANGLE = "angle"
    STRING = "string"
    POINT = "point"
    POINT2D = "point2d"
    COUNT = "count"


INTEGER_KINDS = frozenset({Kind.INT, Kind.SHORT, Kind.FLAGS, Kind.COUNT})
FLOAT_KINDS = frozenset({Kind.FLOAT, Kind.ANGLE})
POINT_KINDS = frozenset({Kind.POINT, Kind.POINT2D})

_SHORT_MIN = -32768
_SHORT_MAX = 32767


@dataclass(frozen=True)
class Field:
    name: str
    code: int
    kind: Kind
    default: Any = None
    versions: VersionRange = ALWAYS
    repeat: bool = False
    required: bool = False
    valid: tuple[int, int] | frozenset[int] | None = None
    fill: tuple[Any, ...] = ()
    nonempty: bool = False
    condition: Callable[[Mapping[str, Any]], bool] | None = None
    count_of: str | None = None
    alt_codes: tuple[int, ...] = ()
    accumulate: bool = False

    def __post_init__(self) -> None:
        if self.kind is Kind.COUNT and not self.count_of:
            raise ValueError(f"count field {self.name} needs count_of")
        if self.repeat and self.default is None:
            object.__setattr__(self, "default", ())
        if self.kind in POINT_KINDS and self.default is None:
            object.__setattr__(self, "default", _zero_point(self.kind))

    @property
    def axis_codes(self) -> tuple[int, ...]:
        if self.kind is Kind.POINT:
            return (self.code, self.code + 10, self.code + 20)
        if self.kind is Kind.POINT2D:
            return (self.code, self.code + 10)
        return (self.code, *self.alt_codes)

    def empty_value(self) -> Any:
        if self.repeat:
            return []
        return self.default

    def accepts(self, value: Any) -> bool:
        if self.valid is None:
            return True
        if isinstance(self.valid, tuple):
            lo, hi = self.valid
            return lo <= value <= hi
        return value in self.valid


@dataclass(frozen=True)
class Marker:
    name: str
    versions: VersionRange = ALWAYS


@dataclass(frozen=True)
class AppGroup:
    name: str
    fields: tuple[Field, ...]
    versions: VersionRange = ALWAYS


def _zero_point(kind: Kind) -> tuple[float, ...]:
    if kind is Kind.POINT2D:
        return (0.0, 0.0)
    return (0.0, 0.0, 0.0)


def decode_value(kind: Kind, raw: str, *, code: int | None = None, line_number: int | None = None) -> Any:
    if kind is Kind.STRING:
        return raw
    text = raw.strip()
    try:
        if kind is Kind.HANDLE:
            return int(text, 16)
        if kind in INTEGER_KINDS:
            value = int(text)
            if kind is Kind.SHORT and not _SHORT_MIN <= value <= _SHORT_MAX:
                raise Malformed(
                    f"value {value} out of 16-bit range for group code {code}",
                    code=code,
                    value=raw,
                    line_number=line_number,
                )
            return value
        if kind in FLOAT_KINDS or kind in POINT_KINDS:
            value = float(text)
            if not math.isfinite(value):
                raise ValueError(text)
            return value
    except ValueError:
        raise Malformed(
            f"cannot convert {raw!r} to {kind.value} for group code {code}",
            code=code,
            value=raw,
            line_number=line_number,
        ) from None
    raise ValueError(f"unsupported field kind: {kind}")


def format_value(kind: Kind, value: Any, *, precision: int = 6, code: int | None = None) -> str:
    try:
        if kind is Kind.STRING:
            return str(value)
        if kind is Kind.HANDLE:
            return f"{int(value):x}"
        if kind in INTEGER_KINDS:
            return str(int(value))
        if kind in FLOAT_KINDS or kind in POINT_KINDS:
            return f"{float(value):.{precision}f}"
    except (TypeError, ValueError):
        raise Malformed(
            f"cannot write {value!r} as {kind.value} for group code {code}",
            code=code,
            value=str(value),
        ) from None
    raise ValueError(f"unsupported field kind: {kind}")


_GROUP_CODE_RANGES: tuple[tuple[int, int, Kind], ...] = (
    (0, 9, Kind.STRING),
    (10, 59, Kind.FLOAT),
    (60, 79, Kind.INT),
    (90, 99, Kind.INT),
    (100, 102, Kind.STRING),
    (105, 105, Kind.STRING),
    (110, 149, Kind.FLOAT),
    (160, 179, Kind.INT),
    (210, 239, Kind.FLOAT),
    (270, 299, Kind.INT),
    (300, 369, Kind.STRING),
    (370, 389, Kind.INT),
    (390, 399, Kind.STRING),
    (400, 409, Kind.INT),
    (410, 419, Kind.STRING),
    (420, 429, Kind.INT),
    (430, 439, Kind.STRING),
    (440, 459, Kind.INT),
    (460, 469, Kind.FLOAT),
    (470, 481, Kind.STRING),
    (999, 1009, Kind.STRING),
    (1010, 1059, Kind.FLOAT),
    (1060, 1071, Kind.INT),
)


def group_code_kind(code: int) -> Kind:
    for lo, hi, kind in _GROUP_CODE_RANGES:
        if lo <= code <= hi:
            return kind
    return Kind.STRING
