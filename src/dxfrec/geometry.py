from __future__ import annotations

import math
from typing import Any, Sequence

from .errors import DegenerateGeometry
from .record import Point3D, Record
from .schema import new

# ATTRIB / ATTDEF flags (group code 70).
ATTRIB_INVISIBLE = 1
ATTRIB_CONSTANT = 2
ATTRIB_VERIFY = 4
ATTRIB_PRESET = 8

# LAYER flags (group code 70).
LAYER_FROZEN = 1
LAYER_LOCKED = 4
LAYER_XREFERENCED = 16
LAYER_XRESOLVED = 32
LAYER_REFERENCED = 64


def midpoint(record: Record) -> Point3D:
    start, end = _line_points(record)
    return (
        (start[0] + end[0]) / 2.0,
        (start[1] + end[1]) / 2.0,
        (start[2] + end[2]) / 2.0,
    )


def length(record: Record) -> float:
    start, end = _line_points(record)
    return math.dist(start, end)


def create_line(start: Sequence[float], end: Sequence[float], **dxfattribs: Any) -> Record:
    record = new("LINE", start=start, end=end, **dxfattribs)
    if record.dxf["start"] == record.dxf["end"]:
        raise DegenerateGeometry("start point and end point are identical", dxftype="LINE")
    return record


def face_edge_invisible(record: Record, edge: int) -> bool:
    _expect(record, "3DFACE")
    if not 0 <= edge <= 3:
        raise ValueError(f"3DFACE edge index must be 0..3, got {edge}")
    return bool(record.dxf["invisible_edges"] & (1 << edge))


def is_invisible(record: Record) -> bool:
    return _attrib_flag(record, ATTRIB_INVISIBLE)


def is_constant(record: Record) -> bool:
    return _attrib_flag(record, ATTRIB_CONSTANT)


def is_verification_required(record: Record) -> bool:
    return _attrib_flag(record, ATTRIB_VERIFY)


def is_preset(record: Record) -> bool:
    return _attrib_flag(record, ATTRIB_PRESET)


def is_frozen(record: Record) -> bool:
    return _layer_flag(record, LAYER_FROZEN)


def is_locked(record: Record) -> bool:
    return _layer_flag(record, LAYER_LOCKED)


def is_xreferenced(record: Record) -> bool:
    return _layer_flag(record, LAYER_XREFERENCED)


def is_xresolved(record: Record) -> bool:
    return _layer_flag(record, LAYER_XRESOLVED)


def is_referenced(record: Record) -> bool:
    return _layer_flag(record, LAYER_REFERENCED)


def is_off(record: Record) -> bool:
    _expect(record, "LAYER")
    return record.dxf["color"] < 0


def _line_points(record: Record) -> tuple[Point3D, Point3D]:
    _expect(record, "LINE")
    return record.dxf["start"], record.dxf["end"]


def _attrib_flag(record: Record, bit: int) -> bool:
    _expect(record, "ATTRIB", "ATTDEF")
    return bool(record.dxf["flags"] & bit)


def _layer_flag(record: Record, bit: int) -> bool:
    _expect(record, "LAYER")
    return bool(record.dxf["flags"] & bit)


def _expect(record: Record, *dxftypes: str) -> None:
    if record.dxftype not in dxftypes:
        raise TypeError(f"expected {' or '.join(dxftypes)}, got {record.dxftype}")
