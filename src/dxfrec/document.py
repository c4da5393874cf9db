from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, TextIO

from loguru import logger

from . import entities, objects, tables  # noqa: F401  (registers the record types)
from .assembler import read_record
from .config import DEFAULT_CONFIG, Config
from .encoder import write_record
from .errors import (
    DegenerateGeometry,
    Diagnostic,
    DiagnosticKind,
    DXFError,
    Malformed,
    VersionMismatch,
)
from .record import Record
from .schema import find_record_type, supported_types, type_aliases
from .tags import Tag, TagReader, TagWriter
from .versions import DXFVersion, parse_version

SUPPORTED_TYPES = supported_types()
TYPE_ALIASES = type_aliases()
TERMINATORS = ("ENDSEC", "EOF")

_RECOVERABLE = (Malformed, DegenerateGeometry, VersionMismatch)


def read(
    path: str | Path,
    version: DXFVersion | str,
    *,
    config: Config | None = None,
    skip_invalid: bool = False,
    encoding: str = "utf-8",
) -> "Document":
    with open(path, "r", encoding=encoding, newline="") as stream:
        return read_stream(stream, version, name=str(path), config=config, skip_invalid=skip_invalid)


def read_stream(
    stream: TextIO,
    version: DXFVersion | str,
    *,
    name: str | None = None,
    config: Config | None = None,
    skip_invalid: bool = False,
) -> "Document":
    """Read ``0/<NAME>`` headed records until ``0/ENDSEC``, ``0/EOF`` or end of stream.

    With ``skip_invalid`` a record that fails to decode or validate is
    recorded in ``Document.errors`` and reading resumes at the next code 0.
    Transport failures always propagate.
    """
    version = parse_version(version)
    config = config or DEFAULT_CONFIG
    reader = TagReader(stream, name)
    records: list[Record] = []
    errors: list[DXFError] = []
    diagnostics: list[Diagnostic] = []

    while True:
        try:
            tag = reader.next_tag()
        except Malformed as exc:
            if not skip_invalid:
                raise
            errors.append(exc)
            reader.skip_record()
            continue
        if tag is None:
            break
        if tag.code != 0:
            exc = Malformed(
                f"expected group code 0 in {reader.name}, got {tag.code}",
                code=tag.code,
                value=tag.value,
                line_number=reader.tag_line,
            )
            if not skip_invalid:
                raise exc
            errors.append(exc)
            reader.skip_record()
            continue

        dxftype = tag.value.strip()
        if dxftype in TERMINATORS:
            break
        record_type = find_record_type(dxftype)
        if record_type is None:
            header_line = reader.tag_line
            skipped = reader.skip_record()
            message = f"skipped unsupported record {dxftype} ({skipped} tags) in {reader.name}"
            diagnostics.append(
                Diagnostic(DiagnosticKind.UNRECOGNIZED, message, code=0, value=dxftype, line_number=header_line)
            )
            logger.warning(f"{message} (line {header_line})")
            continue

        try:
            record = read_record(reader, version, record_type, config=config)
        except _RECOVERABLE as exc:
            if not skip_invalid:
                raise
            logger.warning(f"Skipping invalid {dxftype} record in {reader.name}: {exc}")
            errors.append(exc)
            reader.skip_record()
            continue
        records.append(record)

    logger.info(f"Read {len(records)} records from {reader.name} ({len(errors)} skipped)")
    return Document(
        version=version,
        records=records,
        errors=errors,
        diagnostics=diagnostics,
        name=reader.name,
    )


def write(
    target: str | Path | TextIO,
    records: Iterable[Record],
    version: DXFVersion | str,
    *,
    config: Config | None = None,
    terminator: str | None = "ENDSEC",
    encoding: str = "utf-8",
) -> int:
    """Write ``records`` to a path or text stream; returns the number of tags written."""
    version = parse_version(version)
    if isinstance(target, (str, Path)):
        with open(target, "w", encoding=encoding, newline="\n") as stream:
            return _write_stream(stream, records, version, config, terminator, name=str(target))
    return _write_stream(target, records, version, config, terminator, name=None)


def _write_stream(
    stream: TextIO,
    records: Iterable[Record],
    version: DXFVersion,
    config: Config | None,
    terminator: str | None,
    *,
    name: str | None,
) -> int:
    writer = TagWriter(stream, name)
    count = 0
    written = 0
    for record in records:
        count += write_record(writer, record, version, config=config)
        written += 1
    if terminator:
        writer.write_tag(Tag(0, terminator))
        count += 1
    logger.info(f"Wrote {written} records to {writer.name} at {version}")
    return count


@dataclass(frozen=True)
class Document:
    version: DXFVersion
    records: list[Record] = field(default_factory=list)
    errors: list[DXFError] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "version", parse_version(self.version))

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def query(self, types: str | Iterable[str] | None = None) -> Iterator[Record]:
        type_set = set(_normalize_types(types))
        for record in self.records:
            if record.dxftype in type_set:
                yield record

    def write(self, target: str | Path | TextIO, **kwargs) -> int:
        return write(target, self.records, self.version, **kwargs)

    def export_dxf(self, output_path: str, **kwargs):
        from .convert import to_dxf

        return to_dxf(self, output_path, **kwargs)


def _normalize_types(types: str | Iterable[str] | None) -> list[str]:
    if types is None:
        return list(SUPPORTED_TYPES)
    if isinstance(types, str):
        tokens = re.split(r"[,\s]+", types.strip())
    else:
        tokens = list(types)

    normalized = [token.strip().upper() for token in tokens if token and token.strip()]
    normalized = [TYPE_ALIASES.get(token, token) for token in normalized]
    if not normalized or any(token in {"*", "ALL"} for token in normalized):
        return list(SUPPORTED_TYPES)

    selected: list[str] = []
    seen = set()
    for token in normalized:
        if any(ch in token for ch in "*?[]"):
            matches = [name for name in SUPPORTED_TYPES if fnmatch.fnmatchcase(name, token)]
        elif token in SUPPORTED_TYPES:
            matches = [token]
        else:
            raise ValueError(f"unsupported record type: {token}")
        for name in matches:
            if name not in seen:
                seen.add(name)
                selected.append(name)
    return selected
