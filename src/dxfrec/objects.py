from __future__ import annotations

from .fields import AppGroup, Field, Kind, Marker
from .schema import RecordType, owner_groups, register
from .versions import DXFVersion, since

R13 = DXFVersion.R13
R14 = DXFVersion.R14
R2000 = DXFVersion.R2000


def object_head() -> tuple:
    return (Field("handle", 5, Kind.HANDLE), *owner_groups())


GROUP = register(
    RecordType(
        "GROUP",
        items=(
            *object_head(),
            Marker("AcDbGroup", since(R13)),
            Field("description", 300, Kind.STRING, default="", required=True),
            Field("unnamed", 70, Kind.INT, default=0, required=True, valid=(0, 1)),
            Field("selectable", 71, Kind.INT, default=1, required=True, valid=(0, 1)),
            Field("entities", 340, Kind.STRING, repeat=True),
        ),
        min_version=R13,
    )
)

IMAGEDEF = register(
    RecordType(
        "IMAGEDEF",
        items=(
            Field("handle", 5, Kind.HANDLE),
            # Every IMAGEDEF_REACTOR pointing here is listed, not just the owner.
            AppGroup("ACAD_REACTORS", (Field("reactors", 330, Kind.STRING, repeat=True),), since(R14)),
            AppGroup("ACAD_XDICTIONARY", (Field("xdictionary", 360, Kind.STRING, default=""),), since(R14)),
            Marker("AcDbRasterImageDef", since(R13)),
            Field("class_version", 90, Kind.INT, default=0, required=True),
            Field("filename", 1, Kind.STRING, default="", required=True),
            Field("image_size", 10, Kind.POINT2D, required=True),
            Field("pixel_size", 11, Kind.POINT2D, default=(1.0, 1.0), required=True),
            Field("loaded", 280, Kind.INT, default=1, required=True, valid=(0, 1)),
            Field("resolution_units", 281, Kind.INT, default=0, required=True, valid=frozenset({0, 2, 5})),
        ),
        min_version=R14,
    )
)

IMAGEDEF_REACTOR = register(
    RecordType(
        "IMAGEDEF_REACTOR",
        items=(
            *object_head(),
            Marker("AcDbRasterImageDefReactor", since(R13)),
            Field("class_version", 90, Kind.INT, default=2, required=True),
            Field("image", 330, Kind.STRING, default="", required=True),
        ),
        min_version=R14,
    )
)

XRECORD = register(
    RecordType(
        "XRECORD",
        items=(
            *object_head(),
            Marker("AcDbXrecord", since(R13)),
            Field("cloning", 280, Kind.INT, default=1, versions=since(R2000), required=True, valid=(0, 5)),
        ),
        min_version=R13,
        catch_all="data",
    )
)
