from __future__ import annotations

from typing import Any

from loguru import logger

from .config import DEFAULT_CONFIG, Config
from .errors import DiagnosticKind, Malformed, VersionMismatch
from .fields import Field, Kind
from .record import Record
from .schema import get_record_type
from .versions import DXFVersion


def finalize(record: Record, version: DXFVersion | None = None, *, config: Config | None = None) -> Record:
    """Apply default fills and validity rules to ``record`` in place.

    Raises Malformed, DegenerateGeometry or VersionMismatch when the record
    cannot be accepted; softer findings are attached as diagnostics.
    """
    config = config or DEFAULT_CONFIG
    record_type = get_record_type(record.dxftype)
    if not record_type.supported_at(version):
        message = f"{record.dxftype} requires {record_type.min_version} or later"
        if config.strict_versions:
            raise VersionMismatch(message, dxftype=record.dxftype, version=version)
        record.report(DiagnosticKind.VERSION_GATED, message)

    for spec in record_type.fields:
        if spec.kind is Kind.COUNT:
            _check_count(record, spec, config)
            continue
        value = record.dxf.get(spec.name, spec.empty_value())
        if spec.fill and not spec.repeat and value in spec.fill:
            logger.warning(f"{record.dxftype}: {spec.name} {value!r} replaced by default {spec.default!r}")
            value = spec.default
        record.dxf[spec.name] = value
        if spec.repeat and len(value) > config.max_repeat:
            raise Malformed(
                f"{record.dxftype} {spec.name} has more than {config.max_repeat} values",
                code=spec.code,
            )
        if spec.nonempty and not value:
            raise Malformed(
                f"{record.dxftype} {spec.name} must not be empty",
                code=spec.code,
                value="",
            )
        if spec.valid is not None and value is not None and not spec.repeat and not spec.accepts(value):
            _out_of_range(record, spec, value, config)
    if record_type.catch_all is not None:
        record.dxf.setdefault(record_type.catch_all, [])

    for validator in record_type.validators:
        validator(record, config)
    return record


def _out_of_range(record: Record, spec: Field, value: Any, config: Config) -> None:
    message = f"{record.dxftype} {spec.name} value {value} outside {_describe(spec.valid)}"
    if config.strict_values:
        raise Malformed(message, code=spec.code, value=str(value))
    record.report(DiagnosticKind.OUT_OF_RANGE, message, code=spec.code, value=str(value))


def _check_count(record: Record, spec: Field, config: Config) -> None:
    expected = record.counts.get(spec.count_of)
    if expected is None:
        return
    actual = len(record.dxf.get(spec.count_of, ()))
    if expected == actual:
        return
    message = f"{record.dxftype} {spec.name} is {expected} but {actual} {spec.count_of} were read"
    if config.strict_values:
        raise Malformed(message, code=spec.code, value=str(expected))
    record.report(DiagnosticKind.COUNT_MISMATCH, message, code=spec.code, value=str(expected))


def _describe(valid) -> str:
    if isinstance(valid, tuple):
        return f"{valid[0]}..{valid[1]}"
    return "{" + ", ".join(str(v) for v in sorted(valid)) + "}"
