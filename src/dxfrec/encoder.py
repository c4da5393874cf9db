from __future__ import annotations

from typing import Any, Iterator, Mapping

from .config import DEFAULT_CONFIG, Config
from .fields import POINT_KINDS, AppGroup, Field, Kind, Marker, format_value, group_code_kind
from .record import Record
from .schema import RecordType, get_record_type
from .tags import Tag, TagWriter
from .validation import finalize
from .versions import DXFVersion, parse_version


def encode(record: Record, version: DXFVersion | str, *, config: Config | None = None) -> Iterator[Tag]:
    """Encode the body of ``record`` for ``version``, without the code 0 header.

    The record is validated up front, so a rejected record raises before any
    tag is produced. ``record`` itself is left untouched.
    """
    config = config or DEFAULT_CONFIG
    version = parse_version(version)
    record_type = get_record_type(record.dxftype)
    work = record.copy()
    # Counts are derived from the lists on output.
    work.counts.clear()
    finalize(work, version, config=config)
    return _emit_record(record_type, work.dxf, version, config.float_precision)


def write_record(
    writer: TagWriter,
    record: Record,
    version: DXFVersion | str,
    *,
    config: Config | None = None,
) -> int:
    version = parse_version(version)
    # Formatting errors surface before the header reaches the stream.
    body = list(encode(record, version, config=config))
    name = get_record_type(record.dxftype).name_for(version)
    writer.write_tag(Tag(0, name))
    return 1 + writer.write_tags(body)


def _emit_record(
    record_type: RecordType,
    values: Mapping[str, Any],
    version: DXFVersion,
    precision: int,
) -> Iterator[Tag]:
    for item in record_type.items:
        if isinstance(item, Marker):
            if version in item.versions:
                yield Tag(100, item.name)
        elif isinstance(item, AppGroup):
            if version not in item.versions:
                continue
            body = [tag for spec in item.fields for tag in _emit_field(spec, values, version, precision)]
            if body:
                yield Tag(102, "{" + item.name)
                yield from body
                yield Tag(102, "}")
        else:
            yield from _emit_field(item, values, version, precision)
    if record_type.catch_all is not None:
        for code, value in values[record_type.catch_all]:
            yield Tag(code, format_value(group_code_kind(code), value, precision=precision, code=code))


def _emit_field(spec: Field, values: Mapping[str, Any], version: DXFVersion, precision: int) -> Iterator[Tag]:
    if version not in spec.versions:
        return
    if spec.condition is not None and not spec.condition(values):
        return
    if spec.kind is Kind.COUNT:
        yield Tag(spec.code, str(len(values[spec.count_of])))
        return
    value = values[spec.name]
    if value is None:
        return
    if not spec.required and _is_default(spec, value):
        return
    if spec.repeat:
        for item in value:
            yield from _emit_value(spec, item, precision)
    else:
        yield from _emit_value(spec, value, precision)


def _emit_value(spec: Field, value: Any, precision: int) -> Iterator[Tag]:
    if spec.kind in POINT_KINDS:
        for code, coord in zip(spec.axis_codes, value):
            yield Tag(code, format_value(Kind.FLOAT, coord, precision=precision, code=code))
    else:
        yield Tag(spec.code, format_value(spec.kind, value, precision=precision, code=spec.code))


def _is_default(spec: Field, value: Any) -> bool:
    if spec.repeat:
        return len(value) == 0
    if spec.kind in POINT_KINDS:
        return tuple(value) == tuple(spec.default)
    return value == spec.default
