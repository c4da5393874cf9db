from __future__ import annotations

from .config import Config
from .errors import DegenerateGeometry, DiagnosticKind
from .fields import Field, Kind, Marker
from .record import Record
from .schema import (
    COLOR_BYLAYER,
    DEFAULT_LAYER,
    DEFAULT_LINETYPE,
    DEFAULT_PROXY_ENTITY_ID,
    DEFAULT_TEXTSTYLE,
    RecordType,
    owner_groups,
    register,
)
from .versions import DXFVersion, only, since, until

R11 = DXFVersion.R11
R12 = DXFVersion.R12
R13 = DXFVersion.R13
R14 = DXFVersion.R14
R2000 = DXFVersion.R2000
R2008 = DXFVersion.R2008

EXTRUSION_DEFAULT = (0.0, 0.0, 1.0)


def entity_head(*, elevation: bool = True, elevation_first: bool = False) -> tuple:
    items = [
        Field("handle", 5, Kind.HANDLE),
        *owner_groups(),
        Marker("AcDbEntity", since(R13)),
        Field("paperspace", 67, Kind.SHORT, default=0, valid=(0, 1)),
        Field("layer", 8, Kind.STRING, default=DEFAULT_LAYER, required=True, fill=("",)),
        Field("linetype", 6, Kind.STRING, default=DEFAULT_LINETYPE, fill=("",)),
    ]
    color = Field("color", 62, Kind.SHORT, default=COLOR_BYLAYER, valid=(0, 257))
    height = Field("elevation", 38, Kind.FLOAT, default=0.0, versions=until(R11))
    if not elevation:
        items.append(color)
    else:
        # Writers differ per entity in whether 38 or 62 comes first.
        items += [height, color] if elevation_first else [color, height]
    items += [
        Field("linetype_scale", 48, Kind.FLOAT, default=1.0, versions=since(R13)),
        Field("visibility", 60, Kind.SHORT, default=0, versions=since(R13), valid=(0, 1)),
    ]
    return tuple(items)


def _extrusion() -> Field:
    return Field("extrusion", 210, Kind.POINT, default=EXTRUSION_DEFAULT, versions=since(R12))


def _thickness(**kwargs) -> Field:
    return Field("thickness", 39, Kind.FLOAT, default=0.0, **kwargs)


def _reject_degenerate_line(record: Record, config: Config) -> None:
    if tuple(record.dxf["start"]) == tuple(record.dxf["end"]):
        raise DegenerateGeometry(
            "start point and end point are identical",
            dxftype=record.dxftype,
            handle=record.handle,
        )


def _reject_zero_direction(record: Record, config: Config) -> None:
    if all(v == 0.0 for v in record.dxf["unit_vector"]):
        raise DegenerateGeometry(
            "direction vector has zero length",
            dxftype=record.dxftype,
            handle=record.handle,
        )


def _check_alignment(record: Record, config: Config) -> None:
    dxf = record.dxf
    if not _is_aligned(dxf):
        # 11 is only written for aligned text.
        if any(dxf["align_point"]):
            record.report(
                DiagnosticKind.OUT_OF_RANGE,
                "alignment point is not written while halign and valign are 0",
                code=11,
                value=str(tuple(dxf["align_point"])),
            )
        return
    if tuple(dxf["insert"]) == tuple(dxf["align_point"]):
        record.report(
            DiagnosticKind.OUT_OF_RANGE,
            "alignment point equals insertion point, alignment reset to 0",
        )
        dxf["halign"] = 0
        dxf["valign"] = 0


def _check_proxy_class_id(record: Record, config: Config) -> None:
    class_id = record.dxf["class_id"]
    if class_id != DEFAULT_PROXY_ENTITY_ID:
        record.report(
            DiagnosticKind.BAD_PROXY_CLASS_ID,
            f"proxy entity class id {class_id}, expected {DEFAULT_PROXY_ENTITY_ID}",
            code=90,
            value=str(class_id),
        )


def _is_aligned(values) -> bool:
    return values["halign"] != 0 or values["valign"] != 0


FACE = register(
    RecordType(
        "3DFACE",
        items=(
            *entity_head(),
            Marker("AcDbFace", since(R13)),
            _thickness(versions=until(R13)),
            Field("first", 10, Kind.POINT, required=True),
            Field("second", 11, Kind.POINT, required=True),
            Field("third", 12, Kind.POINT, required=True),
            Field("fourth", 13, Kind.POINT, required=True),
            Field("invisible_edges", 70, Kind.FLAGS, default=0, required=True, valid=(0, 15)),
        ),
    )
)

LINE = register(
    RecordType(
        "LINE",
        items=(
            *entity_head(elevation_first=True),
            Marker("AcDbLine", since(R13)),
            _thickness(),
            Field("start", 10, Kind.POINT, required=True),
            Field("end", 11, Kind.POINT, required=True),
            _extrusion(),
        ),
        names=((until(R11), "3DLINE"),),
        validators=(_reject_degenerate_line,),
    )
)


def _modeler_items(*, solid: bool) -> tuple:
    items = [
        *entity_head(elevation_first=not solid),
        _thickness(),
        Marker("AcDbModelerGeometry", since(R13)),
    ]
    if solid:
        items.append(Marker("AcDb3dSolid", since(R2008)))
    items += [
        Field("modeler_version", 70, Kind.INT, default=1, versions=since(R13), required=True),
        Field("proprietary_data", 1, Kind.STRING, repeat=True),
        Field("additional_data", 3, Kind.STRING, repeat=True),
    ]
    if solid:
        items.append(Field("history", 350, Kind.STRING, default="", versions=since(R2008)))
    return tuple(items)


SOLID3D = register(RecordType("3DSOLID", items=_modeler_items(solid=True), min_version=R13))

BODY = register(RecordType("BODY", items=_modeler_items(solid=False), min_version=R13))

PROXY_ENTITY = register(
    RecordType(
        "ACAD_PROXY_ENTITY",
        items=(
            *entity_head(),
            Marker("AcDbZombieEntity", only(R13)),
            Marker("AcDbProxyEntity", since(R14)),
            Field("original_data_format", 70, Kind.INT, default=0, versions=since(R2000), required=True),
            Field("class_id", 90, Kind.INT, default=DEFAULT_PROXY_ENTITY_ID, required=True),
            Field("application_class_id", 91, Kind.INT, default=0, required=True),
            Field("graphics_data_size", 92, Kind.INT, default=0, required=True),
            Field("graphics_data", 310, Kind.STRING, repeat=True),
            Field("entity_data_size", 93, Kind.INT, default=0, required=True),
            Field("object_ids", 330, Kind.STRING, repeat=True, alt_codes=(340, 350, 360)),
            Field("object_ids_end", 94, Kind.INT, default=0, required=True),
            Field("drawing_format", 95, Kind.INT, default=0, versions=since(R2000), required=True),
        ),
        names=((until(R13), "ACAD_ZOMBIE_ENTITY"),),
        min_version=R13,
        validators=(_check_proxy_class_id,),
    )
)


def _text_attribute_items(definition: bool) -> tuple:
    marker = "AcDbAttributeDefinition" if definition else "AcDbAttribute"
    items = [
        *entity_head(),
        Marker("AcDbText", since(R13)),
        _thickness(),
        Field("insert", 10, Kind.POINT, required=True),
        Field("height", 40, Kind.FLOAT, default=1.0, required=True, fill=(0.0,)),
        Field("text", 1, Kind.STRING, default="", required=True, nonempty=not definition),
        Marker(marker, since(R13)),
    ]
    if definition:
        items.append(Field("prompt", 3, Kind.STRING, default="", required=True))
    items += [
        Field("tag", 2, Kind.STRING, default="", required=True, nonempty=True),
        Field("flags", 70, Kind.FLAGS, default=0, required=True, valid=(0, 15)),
        Field("field_length", 73, Kind.SHORT, default=0),
        Field("rotation", 50, Kind.ANGLE, default=0.0),
        Field("width", 41, Kind.FLOAT, default=1.0, fill=(0.0,)),
        Field("oblique", 51, Kind.ANGLE, default=0.0),
        Field("style", 7, Kind.STRING, default=DEFAULT_TEXTSTYLE, fill=("",)),
        Field("text_generation_flag", 71, Kind.FLAGS, default=0, valid=(0, 6)),
        Field("halign", 72, Kind.SHORT, default=0, valid=(0, 5)),
        Field("valign", 74, Kind.SHORT, default=0, valid=(0, 3)),
        Field("align_point", 11, Kind.POINT, required=True, condition=_is_aligned),
        _extrusion(),
    ]
    return tuple(items)


ATTRIB = register(
    RecordType(
        "ATTRIB",
        items=_text_attribute_items(definition=False),
        validators=(_check_alignment,),
    )
)

ATTDEF = register(
    RecordType(
        "ATTDEF",
        items=_text_attribute_items(definition=True),
        validators=(_check_alignment,),
    )
)

MLINE = register(
    RecordType(
        "MLINE",
        items=(
            *entity_head(elevation_first=True),
            Marker("AcDbMline", since(R13)),
            _thickness(),
            Field("style_name", 2, Kind.STRING, default="STANDARD", required=True, fill=("",)),
            Field("style_handle", 340, Kind.STRING, default="", required=True),
            Field("scale_factor", 40, Kind.FLOAT, default=1.0, required=True),
            Field("justification", 70, Kind.SHORT, default=0, required=True, valid=(0, 2)),
            Field("flags", 71, Kind.FLAGS, default=1, required=True, valid=(0, 15)),
            Field("vertex_count", 72, Kind.COUNT, count_of="vertices"),
            Field("style_element_count", 73, Kind.SHORT, default=0, required=True),
            Field("start", 10, Kind.POINT, required=True),
            _extrusion(),
            Field("vertices", 11, Kind.POINT, repeat=True),
            Field("segment_directions", 12, Kind.POINT, repeat=True),
            Field("miter_directions", 13, Kind.POINT, repeat=True),
            Field("parameter_count", 74, Kind.COUNT, count_of="element_parameters", accumulate=True),
            Field("element_parameters", 41, Kind.FLOAT, repeat=True),
            Field("fill_parameter_count", 75, Kind.COUNT, count_of="fill_parameters", accumulate=True),
            Field("fill_parameters", 42, Kind.FLOAT, repeat=True),
        ),
        min_version=R13,
    )
)

XLINE = register(
    RecordType(
        "XLINE",
        items=(
            *entity_head(),
            Marker("AcDbXline", since(R13)),
            Field("start", 10, Kind.POINT, required=True),
            Field("unit_vector", 11, Kind.POINT, default=(1.0, 0.0, 0.0), required=True),
        ),
        min_version=R13,
        validators=(_reject_zero_direction,),
    )
)

LWPOLYLINE = register(
    RecordType(
        "LWPOLYLINE",
        items=(
            *entity_head(elevation=False),
            Marker("AcDbPolyline", since(R13)),
            Field("vertex_count", 90, Kind.COUNT, count_of="vertices"),
            Field("flags", 70, Kind.FLAGS, default=0, required=True, valid=(0, 129)),
            Field("const_width", 43, Kind.FLOAT, default=0.0),
            Field("elevation", 38, Kind.FLOAT, default=0.0),
            _thickness(),
            Field("vertices", 10, Kind.POINT2D, repeat=True),
            _extrusion(),
        ),
        min_version=R14,
    )
)
