from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, NamedTuple, Union

from .fields import POINT_KINDS, AppGroup, Field, Kind, Marker
from .record import Record
from .versions import ALWAYS, DXFVersion, VersionRange, since

DEFAULT_LINETYPE = "BYLAYER"
DEFAULT_LAYER = "0"
DEFAULT_TEXTSTYLE = "STANDARD"
COLOR_BYBLOCK = 0
COLOR_BYLAYER = 256
MODELSPACE = 0
PAPERSPACE = 1
DEFAULT_PROXY_ENTITY_ID = 498

Item = Union[Field, Marker, AppGroup]
Validator = Callable[..., None]


def owner_groups() -> tuple[AppGroup, ...]:
    return (
        AppGroup("ACAD_REACTORS", (Field("owner", 330, Kind.STRING, default=""),), since(DXFVersion.R14)),
        AppGroup(
            "ACAD_XDICTIONARY", (Field("xdictionary", 360, Kind.STRING, default=""),), since(DXFVersion.R14)
        ),
    )


class Slot(NamedTuple):
    field: Field
    axis: int
    versions: VersionRange
    group: str | None


@dataclass(frozen=True)
class RecordType:
    dxftype: str
    items: tuple[Item, ...]
    names: tuple[tuple[VersionRange, str], ...] = ()
    aliases: tuple[str, ...] = ()
    min_version: DXFVersion | None = None
    tolerated_markers: frozenset[str] = frozenset()
    validators: tuple[Validator, ...] = ()
    catch_all: str | None = None
    _slots: dict = field(default_factory=dict, init=False, repr=False, compare=False, hash=False)
    _fields: dict = field(default_factory=dict, init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        for item, group, versions in self._walk():
            if not isinstance(item, Field):
                continue
            if item.name in self._fields:
                raise ValueError(f"duplicate field {item.name} in {self.dxftype}")
            self._fields[item.name] = item
            effective = _intersect(item.versions, versions)
            for axis, code in enumerate(item.axis_codes):
                if item.kind not in POINT_KINDS:
                    axis = 0
                self._slots.setdefault(group, {}).setdefault(code, []).append(
                    Slot(item, axis, effective, group)
                )
        if self.catch_all is not None and self.catch_all in self._fields:
            raise ValueError(f"catch-all name {self.catch_all} clashes with a field")

    def _walk(self) -> Iterator[tuple[Item, str | None, VersionRange]]:
        for item in self.items:
            if isinstance(item, AppGroup):
                for member in item.fields:
                    yield member, item.name, item.versions
            else:
                yield item, None, ALWAYS

    @property
    def fields(self) -> tuple[Field, ...]:
        return tuple(self._fields.values())

    def fields_at(self, version: DXFVersion | None) -> tuple[Field, ...]:
        """Fields read and written at ``version``, app group ranges included."""
        return tuple(
            item
            for item, _, versions in self._walk()
            if isinstance(item, Field)
            and (version is None or (version in item.versions and version in versions))
        )

    def get_field(self, name: str) -> Field:
        return self._fields[name]

    def has_field(self, name: str) -> bool:
        return name in self._fields

    def slots(self, code: int, group: str | None = None) -> list[Slot]:
        by_code = self._slots.get(group, {})
        found = by_code.get(code)
        if found:
            return found
        if group is None and self.catch_all is None:
            # Older writers emit grouped handles without the 102 braces.
            for other_group, other in self._slots.items():
                if other_group is not None and code in other:
                    return other[code]
        return []

    def name_for(self, version: DXFVersion | None) -> str:
        if version is not None:
            for versions, name in self.names:
                if version in versions:
                    return name
        return self.dxftype

    def wire_names(self) -> tuple[str, ...]:
        names = [self.dxftype, *(name for _, name in self.names), *self.aliases]
        return tuple(dict.fromkeys(names))

    def markers_for(self, version: DXFVersion | None) -> frozenset[str]:
        names = {
            item.name
            for item in self.items
            if isinstance(item, Marker) and (version is None or version in item.versions)
        }
        return frozenset(names) | self.tolerated_markers

    def supported_at(self, version: DXFVersion | None) -> bool:
        return self.min_version is None or version is None or version >= self.min_version

    def defaults(self) -> dict[str, Any]:
        values = {f.name: f.empty_value() for f in self.fields if f.kind is not Kind.COUNT}
        if self.catch_all is not None:
            values[self.catch_all] = []
        return values


def _intersect(a: VersionRange, b: VersionRange) -> VersionRange:
    lo = a.lo if b.lo is None else b.lo if a.lo is None else max(a.lo, b.lo)
    hi = a.hi if b.hi is None else b.hi if a.hi is None else min(a.hi, b.hi)
    return VersionRange(lo, hi)


_REGISTRY: dict[str, RecordType] = {}
_BY_WIRE_NAME: dict[str, RecordType] = {}


def register(record_type: RecordType) -> RecordType:
    if record_type.dxftype in _REGISTRY:
        raise ValueError(f"record type already registered: {record_type.dxftype}")
    _REGISTRY[record_type.dxftype] = record_type
    for name in record_type.wire_names():
        _BY_WIRE_NAME[name] = record_type
    return record_type


def get_record_type(name: str) -> RecordType:
    key = str(name).strip().upper()
    try:
        return _BY_WIRE_NAME[key]
    except KeyError:
        raise KeyError(f"unsupported record type: {name}") from None


def find_record_type(name: str) -> RecordType | None:
    return _BY_WIRE_NAME.get(str(name).strip().upper())


def supported_types() -> tuple[str, ...]:
    return tuple(_REGISTRY)


def type_aliases() -> dict[str, str]:
    return {
        wire: record_type.dxftype
        for wire, record_type in _BY_WIRE_NAME.items()
        if wire != record_type.dxftype
    }


def new(dxftype: str, **dxfattribs: Any) -> Record:
    record_type = get_record_type(dxftype)
    values = record_type.defaults()
    for name, value in dxfattribs.items():
        if name not in values:
            raise ValueError(f"{record_type.dxftype} has no attribute {name!r}")
        if record_type.has_field(name):
            value = coerce(record_type.get_field(name), value)
        elif name == record_type.catch_all:
            value = [(int(code), item) for code, item in value]
        values[name] = value
    return Record(dxftype=record_type.dxftype, dxf=values)


def coerce(spec: Field, value: Any) -> Any:
    if spec.repeat:
        return [_coerce_one(spec, item) for item in value]
    return _coerce_one(spec, value)


def _coerce_one(spec: Field, value: Any) -> Any:
    if spec.kind in POINT_KINDS:
        size = 3 if spec.kind is Kind.POINT else 2
        coords = [float(v) for v in value]
        if len(coords) == 2 and size == 3:
            coords.append(0.0)
        if len(coords) != size:
            raise ValueError(f"{spec.name} expects {size} coordinates, got {len(coords)}")
        return tuple(coords)
    if value is None:
        return None
    if spec.kind in (Kind.FLOAT, Kind.ANGLE):
        return float(value)
    if spec.kind is Kind.HANDLE and isinstance(value, str):
        return int(value, 16)
    if spec.kind is Kind.STRING:
        return str(value)
    return int(value)
