from __future__ import annotations

from .fields import Field, Kind, Marker
from .schema import RecordType, owner_groups, register
from .versions import DXFVersion, since

R13 = DXFVersion.R13
R2000 = DXFVersion.R2000
R2007 = DXFVersion.R2007

# Older writers put the table's own marker on its entries.
TOLERATED = frozenset({"AcDbSymbolTable"})


def table_head(marker: str) -> tuple:
    return (
        Field("handle", 5, Kind.HANDLE),
        *owner_groups(),
        Marker("AcDbSymbolTableRecord", since(R13)),
        Marker(marker, since(R13)),
        Field("name", 2, Kind.STRING, default="", required=True, nonempty=True),
        Field("flags", 70, Kind.FLAGS, default=0, required=True, valid=(0, 127)),
    )


def _required(name: str, code: int, kind: Kind, default=None, **kwargs) -> Field:
    return Field(name, code, kind, default=default, required=True, **kwargs)


LAYER = register(
    RecordType(
        "LAYER",
        items=(
            *table_head("AcDbLayerTableRecord"),
            # Negative color marks a layer that is switched off.
            _required("color", 62, Kind.SHORT, 7, valid=(-256, 256)),
            _required("linetype", 6, Kind.STRING, "CONTINUOUS", fill=("",)),
            Field("plot", 290, Kind.INT, default=1, versions=since(R2000), valid=(0, 1)),
            _required("lineweight", 370, Kind.SHORT, -3, versions=since(R2000)),
            Field("plot_style", 390, Kind.STRING, default="", versions=since(R2000)),
            Field("material", 347, Kind.STRING, default="", versions=since(R2007)),
        ),
        tolerated_markers=TOLERATED,
    )
)

LTYPE = register(
    RecordType(
        "LTYPE",
        items=(
            *table_head("AcDbLinetypeTableRecord"),
            _required("description", 3, Kind.STRING, ""),
            _required("alignment", 72, Kind.INT, 65, valid=frozenset({65})),
            Field("dash_count", 73, Kind.COUNT, count_of="dash_lengths"),
            _required("pattern_length", 40, Kind.FLOAT, 0.0),
            Field("dash_lengths", 49, Kind.FLOAT, repeat=True),
        ),
        tolerated_markers=TOLERATED,
    )
)

STYLE = register(
    RecordType(
        "STYLE",
        items=(
            *table_head("AcDbTextStyleTableRecord"),
            _required("height", 40, Kind.FLOAT, 0.0),
            _required("width", 41, Kind.FLOAT, 1.0),
            _required("oblique", 50, Kind.ANGLE, 0.0),
            _required("generation_flags", 71, Kind.FLAGS, 0, valid=(0, 6)),
            _required("last_height", 42, Kind.FLOAT, 1.0),
            _required("font", 3, Kind.STRING, "txt"),
            Field("bigfont", 4, Kind.STRING, default=""),
        ),
        tolerated_markers=TOLERATED,
    )
)

VIEW = register(
    RecordType(
        "VIEW",
        items=(
            *table_head("AcDbViewTableRecord"),
            _required("height", 40, Kind.FLOAT, 1.0),
            _required("center", 10, Kind.POINT2D),
            _required("width", 41, Kind.FLOAT, 1.0),
            _required("direction", 11, Kind.POINT, (0.0, 0.0, 1.0)),
            _required("target", 12, Kind.POINT),
            _required("lens_length", 42, Kind.FLOAT, 50.0),
            _required("front_clipping", 43, Kind.FLOAT, 0.0),
            _required("back_clipping", 44, Kind.FLOAT, 0.0),
            _required("twist", 50, Kind.ANGLE, 0.0),
            _required("view_mode", 71, Kind.FLAGS, 0),
        ),
        tolerated_markers=TOLERATED,
    )
)

VPORT = register(
    RecordType(
        "VPORT",
        items=(
            *table_head("AcDbViewportTableRecord"),
            _required("lower_left", 10, Kind.POINT2D),
            _required("upper_right", 11, Kind.POINT2D, (1.0, 1.0)),
            _required("center", 12, Kind.POINT2D),
            _required("snap_base", 13, Kind.POINT2D),
            _required("snap_spacing", 14, Kind.POINT2D, (1.0, 1.0)),
            _required("grid_spacing", 15, Kind.POINT2D, (1.0, 1.0)),
            _required("direction", 16, Kind.POINT, (0.0, 0.0, 1.0)),
            _required("target", 17, Kind.POINT),
            _required("height", 40, Kind.FLOAT, 1.0),
            _required("aspect_ratio", 41, Kind.FLOAT, 1.0),
            _required("lens_length", 42, Kind.FLOAT, 50.0),
            _required("front_clipping", 43, Kind.FLOAT, 0.0),
            _required("back_clipping", 44, Kind.FLOAT, 0.0),
            _required("snap_rotation", 50, Kind.ANGLE, 0.0),
            _required("twist", 51, Kind.ANGLE, 0.0),
            _required("view_mode", 71, Kind.FLAGS, 0),
            _required("circle_zoom", 72, Kind.INT, 100),
            _required("fast_zoom", 73, Kind.INT, 1, valid=(0, 1)),
            _required("ucs_icon", 74, Kind.FLAGS, 3, valid=(0, 3)),
            _required("snap_on", 75, Kind.INT, 0, valid=(0, 1)),
            _required("grid_on", 76, Kind.INT, 0, valid=(0, 1)),
            _required("snap_style", 77, Kind.INT, 0, valid=(0, 1)),
            _required("snap_isopair", 78, Kind.INT, 0, valid=(0, 2)),
        ),
        tolerated_markers=TOLERATED,
    )
)
