from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from .document import Document, _normalize_types
from .record import Record


@dataclass(frozen=True)
class ConvertResult:
    source_name: str | None
    output_path: str
    total_records: int
    written_records: int
    skipped_records: int
    skipped_by_type: dict[str, int]


def to_dxf(
    source: Document | Iterable[Record],
    output_path: str,
    *,
    types: str | Iterable[str] | None = None,
    dxf_version: str = "R2010",
    strict: bool = False,
) -> ConvertResult:
    ezdxf = _require_ezdxf()
    source_name, records = _resolve_records(source, types)

    dxf_doc = ezdxf.new(dxfversion=dxf_version)
    modelspace = dxf_doc.modelspace()

    total = 0
    written = 0
    skipped_by_type: dict[str, int] = {}

    for record in records:
        total += 1
        if record.dxftype == "LAYER":
            ok = _write_layer(dxf_doc, record)
        else:
            ok = _write_record_to_modelspace(modelspace, record)
        if ok:
            written += 1
            continue
        skipped_by_type[record.dxftype] = skipped_by_type.get(record.dxftype, 0) + 1

    skipped = total - written
    if strict and skipped > 0:
        summary = ", ".join(
            f"{dxftype}:{count}" for dxftype, count in sorted(skipped_by_type.items())
        )
        raise ValueError(f"failed to convert {skipped} records ({summary})")

    out_path = Path(output_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    dxf_doc.saveas(str(out_path))
    logger.info(f"Exported {written} of {total} records to {out_path}")

    return ConvertResult(
        source_name=source_name,
        output_path=str(out_path),
        total_records=total,
        written_records=written,
        skipped_records=skipped,
        skipped_by_type=dict(sorted(skipped_by_type.items())),
    )


def _require_ezdxf():
    try:
        import ezdxf
    except Exception as exc:
        raise ImportError(
            "ezdxf is required for exporting records to a DXF drawing. "
            'Install it with `pip install "dxfrec[dxf]"`.'
        ) from exc
    return ezdxf


def _resolve_records(
    source: Document | Iterable[Record],
    types: str | Iterable[str] | None,
) -> tuple[str | None, list[Record]]:
    if isinstance(source, Document):
        return source.name, list(source.query(types))
    type_set = set(_normalize_types(types))
    return None, [record for record in source if record.dxftype in type_set]


def _write_record_to_modelspace(modelspace: Any, record: Record) -> bool:
    try:
        return _write_record_to_modelspace_unsafe(modelspace, record)
    except Exception as exc:
        logger.debug(f"ezdxf rejected {record.dxftype}: {exc}")
        return False


def _write_record_to_modelspace_unsafe(modelspace: Any, record: Record) -> bool:
    dxftype = record.dxftype
    dxf = record.dxf
    dxfattribs = _entity_dxfattribs(dxf)

    if dxftype == "LINE":
        modelspace.add_line(_point3(dxf.get("start")), _point3(dxf.get("end")), dxfattribs=dxfattribs)
        return True

    if dxftype == "3DFACE":
        points = [_point3(dxf.get(name)) for name in ("first", "second", "third", "fourth")]
        face = modelspace.add_3dface(points, dxfattribs=dxfattribs)
        flags = int(dxf.get("invisible_edges", 0))
        for edge in range(4):
            if flags & (1 << edge):
                face.set_edge_visibility(edge, False)
        return True

    if dxftype == "XLINE":
        modelspace.add_xline(
            _point3(dxf.get("start")),
            _point3(dxf.get("unit_vector")),
            dxfattribs=dxfattribs,
        )
        return True

    if dxftype == "LWPOLYLINE":
        points = [(float(x), float(y)) for x, y in dxf.get("vertices", [])]
        if not points:
            return False
        lw = modelspace.add_lwpolyline(
            points,
            format="xy",
            close=bool(int(dxf.get("flags", 0)) & 1),
            dxfattribs=dxfattribs,
        )
        lw.dxf.const_width = float(dxf.get("const_width", 0.0))
        lw.dxf.elevation = float(dxf.get("elevation", 0.0))
        return True

    if dxftype == "MLINE":
        points = [_point3(point) for point in dxf.get("vertices", [])]
        if len(points) < 2:
            return False
        modelspace.add_mline(points, close=bool(int(dxf.get("flags", 0)) & 2), dxfattribs=dxfattribs)
        return True

    if dxftype == "ATTRIB":
        return _write_text_like(modelspace, dxf, dxfattribs)

    if dxftype == "ATTDEF":
        attdef = modelspace.add_attdef(
            str(dxf.get("tag", "")),
            _point3(dxf.get("insert")),
            str(dxf.get("text", "") or ""),
            height=float(dxf.get("height", 1.0)),
            rotation=float(dxf.get("rotation", 0.0)),
            dxfattribs=dxfattribs,
        )
        attdef.dxf.prompt = str(dxf.get("prompt", ""))
        attdef.dxf.flags = int(dxf.get("flags", 0))
        return True

    return False


def _write_text_like(modelspace: Any, dxf: dict[str, Any], dxfattribs: dict[str, Any]) -> bool:
    text = str(dxf.get("text", "") or "")
    if text == "":
        return False
    height = dxf.get("height")
    rotation = dxf.get("rotation")
    text_entity = modelspace.add_text(
        text,
        height=float(height) if height is not None else None,
        rotation=float(rotation) if rotation is not None else None,
        dxfattribs=dxfattribs,
    )
    text_entity.dxf.insert = _point3(dxf.get("insert"))
    return True


def _write_layer(dxf_doc: Any, record: Record) -> bool:
    dxf = record.dxf
    name = str(dxf.get("name", "") or "")
    if name == "":
        return False
    try:
        if dxf_doc.layers.has_entry(name):
            layer = dxf_doc.layers.get(name)
        else:
            layer = dxf_doc.layers.new(name)
        color = int(dxf.get("color", 7))
        aci = _to_valid_aci(abs(color))
        if aci is not None:
            layer.color = aci
        linetype = str(dxf.get("linetype", "") or "")
        if linetype and dxf_doc.linetypes.has_entry(linetype):
            layer.dxf.linetype = linetype
        if color < 0:
            layer.off()
        flags = int(dxf.get("flags", 0))
        if flags & 1:
            layer.freeze()
        if flags & 4:
            layer.lock()
    except Exception as exc:
        logger.debug(f"ezdxf rejected layer {name}: {exc}")
        return False
    return True


def _entity_dxfattribs(dxf: dict[str, Any]) -> dict[str, Any]:
    attribs: dict[str, Any] = {}
    layer = dxf.get("layer")
    if isinstance(layer, str) and layer:
        attribs["layer"] = layer
    color = _to_valid_aci(dxf.get("color"))
    if color is not None:
        attribs["color"] = color
    return attribs


def _to_valid_aci(value: Any) -> int | None:
    try:
        aci = int(value)
    except Exception:
        return None
    if aci in (0, 256, 257):
        return None
    if 1 <= aci <= 255:
        return aci
    return None


def _point3(value: Any) -> tuple[float, float, float]:
    if value is None:
        return (0.0, 0.0, 0.0)
    if isinstance(value, (list, tuple)):
        if len(value) >= 3:
            return (float(value[0]), float(value[1]), float(value[2]))
        if len(value) >= 2:
            return (float(value[0]), float(value[1]), 0.0)
    raise ValueError(f"invalid point value: {value!r}")
