from __future__ import annotations

from typing import Any

from .config import DEFAULT_CONFIG, Config
from .errors import DiagnosticKind, Malformed, TruncatedRecord
from .fields import POINT_KINDS, Kind, decode_value, group_code_kind
from .record import Record
from .schema import RecordType, Slot
from .tags import Tag, TagReader
from .validation import finalize
from .versions import DXFVersion

COMMENT_CODE = 999
MARKER_CODE = 100
APP_GROUP_CODE = 102


def decode_field(
    record_type: RecordType,
    code: int,
    version: DXFVersion | None,
    group: str | None = None,
) -> tuple[Slot | None, bool]:
    """Resolve a group code to the field slot visible at ``version``.

    Returns ``(slot, gated)``: ``slot`` is None when nothing accepts the
    code, and ``gated`` tells whether a field exists for the code but is
    not used at this version.
    """
    candidates = record_type.slots(code, group)
    for slot in candidates:
        if version is None or version in slot.versions:
            return slot, False
    return None, bool(candidates)


def assemble(
    reader: TagReader,
    version: DXFVersion | None,
    record_type: RecordType,
    *,
    config: Config | None = None,
) -> Record:
    """Read one record body, stopping in front of the next code 0.

    The ``0/<NAME>`` header is expected to be consumed by the caller.
    """
    builder = _RecordBuilder(record_type, version, config or DEFAULT_CONFIG)
    while True:
        tag = reader.peek()
        if tag is None:
            raise TruncatedRecord(
                f"{record_type.dxftype} record not terminated by group code 0 in {reader.name}",
                line_number=reader.line_number,
            )
        if tag.code == 0:
            break
        reader.next_tag()
        builder.feed(tag, reader.tag_line)
    builder.close(reader.line_number)
    return builder.record


def read_record(
    reader: TagReader,
    version: DXFVersion | None,
    record_type: RecordType,
    *,
    config: Config | None = None,
) -> Record:
    """Assemble and finalize one record body."""
    record = assemble(reader, version, record_type, config=config)
    return finalize(record, version, config=config)


class _RecordBuilder:
    def __init__(self, record_type: RecordType, version: DXFVersion | None, config: Config) -> None:
        self.record_type = record_type
        self.version = version
        self.config = config
        self.record = Record(dxftype=record_type.dxftype, dxf=record_type.defaults())
        self.group: str | None = None
        self.group_line = 0
        self._axis_counters: dict[str, list[int]] = {}

    def feed(self, tag: Tag, line_number: int) -> None:
        code, raw = tag
        if code == APP_GROUP_CODE:
            self._app_group(raw, line_number)
            return
        if code == MARKER_CODE:
            self._marker(raw, line_number)
            return
        if code == COMMENT_CODE:
            self.record.report(
                DiagnosticKind.COMMENT,
                f"comment: {raw}",
                code=code,
                value=raw,
                line_number=line_number,
            )
            return

        slot, gated = decode_field(self.record_type, code, self.version, self.group)
        if slot is not None:
            value = decode_value(slot.field.kind, raw, code=code, line_number=line_number)
            self._store(slot, value, line_number)
        elif self.record_type.catch_all is not None and self.group is None:
            self._collect(code, raw, line_number)
        elif gated:
            self.record.report(
                DiagnosticKind.VERSION_GATED,
                f"group code {code} is not used at {self.version}",
                code=code,
                value=raw,
                line_number=line_number,
            )
        else:
            self.record.report(
                DiagnosticKind.UNRECOGNIZED,
                f"unrecognized group code {code}",
                code=code,
                value=raw,
                line_number=line_number,
            )

    def close(self, line_number: int) -> None:
        if self.group is not None:
            self.record.report(
                DiagnosticKind.UNBALANCED_GROUP,
                f"application group {self.group} opened at line {self.group_line} is never closed",
                code=APP_GROUP_CODE,
                line_number=line_number,
            )
            self.group = None

    def _app_group(self, raw: str, line_number: int) -> None:
        text = raw.strip()
        if text.startswith("{"):
            if self.group is not None:
                self.record.report(
                    DiagnosticKind.UNBALANCED_GROUP,
                    f"application group {text[1:]} opened inside {self.group}",
                    code=APP_GROUP_CODE,
                    value=raw,
                    line_number=line_number,
                )
            self.group = text[1:]
            self.group_line = line_number
        elif text == "}":
            if self.group is None:
                self.record.report(
                    DiagnosticKind.UNBALANCED_GROUP,
                    "application group closed without being opened",
                    code=APP_GROUP_CODE,
                    value=raw,
                    line_number=line_number,
                )
            self.group = None
        else:
            self.record.report(
                DiagnosticKind.UNRECOGNIZED,
                f"malformed application group tag {raw!r}",
                code=APP_GROUP_CODE,
                value=raw,
                line_number=line_number,
            )

    def _marker(self, raw: str, line_number: int) -> None:
        name = raw.strip()
        if name not in self.record_type.markers_for(self.version):
            self.record.report(
                DiagnosticKind.BAD_SUBCLASS_MARKER,
                f"unexpected subclass marker {name}",
                code=MARKER_CODE,
                value=raw,
                line_number=line_number,
            )

    def _store(self, slot: Slot, value: Any, line_number: int) -> None:
        spec = slot.field
        dxf = self.record.dxf
        if spec.kind is Kind.COUNT:
            counts = self.record.counts
            if spec.accumulate:
                # One count per element of each vertex; they add up to the flat list.
                value += counts.get(spec.count_of, 0)
            counts[spec.count_of] = value
            return
        if not spec.repeat:
            if spec.kind in POINT_KINDS:
                point = list(dxf[spec.name])
                point[slot.axis] = value
                value = tuple(point)
            dxf[spec.name] = value
            return

        items = dxf[spec.name]
        if spec.kind not in POINT_KINDS:
            self._check_bounds(spec.name, len(items), spec.code, line_number)
            items.append(value)
            return
        # Each axis counts its own occurrences, so X, Y and Z of vertex i
        # meet at index i however the tags are interleaved.
        counters = self._axis_counters.setdefault(spec.name, [0] * len(spec.axis_codes))
        index = counters[slot.axis]
        counters[slot.axis] += 1
        self._check_bounds(spec.name, index, spec.code, line_number)
        while len(items) <= index:
            items.append((0.0,) * len(spec.axis_codes))
        point = list(items[index])
        point[slot.axis] = value
        items[index] = tuple(point)

    def _collect(self, code: int, raw: str, line_number: int) -> None:
        items = self.record.dxf[self.record_type.catch_all]
        self._check_bounds(self.record_type.catch_all, len(items), code, line_number)
        items.append((code, decode_value(group_code_kind(code), raw, code=code, line_number=line_number)))

    def _check_bounds(self, name: str, index: int, code: int, line_number: int) -> None:
        if index >= self.config.max_repeat:
            raise Malformed(
                f"{self.record_type.dxftype} {name} has more than {self.config.max_repeat} values",
                code=code,
                line_number=line_number,
            )
