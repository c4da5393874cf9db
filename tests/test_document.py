from __future__ import annotations

import io
from pathlib import Path

import pytest

import dxfrec
from dxfrec.errors import DegenerateGeometry, DiagnosticKind, IoFailure, Malformed
from dxfrec.versions import DXFVersion
from tests._dxf_helpers import dxf_text, line_tags


def _stream(*pairs) -> io.StringIO:
    return io.StringIO(dxf_text(*pairs))


def test_read_stream_collects_records_until_endsec() -> None:
    stream = _stream(
        (0, "LINE"),
        *line_tags(),
        (0, "3DFACE"),
        (8, "0"),
        (11, "1.0"),
        (12, "1.0"),
        (22, "1.0"),
        (0, "ENDSEC"),
        (0, "LINE"),
        *line_tags(),
    )

    doc = dxfrec.read_stream(stream, "R12", name="section.dxf")

    assert doc.version is DXFVersion.R12
    assert [record.dxftype for record in doc] == ["LINE", "3DFACE"]
    assert len(doc) == 2
    assert doc.name == "section.dxf"


def test_read_stream_accepts_old_record_names() -> None:
    stream = _stream((0, "3DLINE"), *line_tags(), (0, "EOF"))

    doc = dxfrec.read_stream(stream, DXFVersion.R11)

    assert [record.dxftype for record in doc] == ["LINE"]


def test_unsupported_records_are_skipped(log_messages) -> None:
    stream = _stream(
        (0, "CIRCLE"),
        (8, "0"),
        (10, "1.0"),
        (40, "2.0"),
        (0, "LINE"),
        *line_tags(),
    )

    doc = dxfrec.read_stream(stream, DXFVersion.R12)

    assert [record.dxftype for record in doc] == ["LINE"]
    (diagnostic,) = doc.diagnostics
    assert diagnostic.kind is DiagnosticKind.UNRECOGNIZED
    assert diagnostic.value == "CIRCLE"
    assert diagnostic.line_number == 2
    assert any(m.startswith("WARNING") and "CIRCLE" in m for m in log_messages)


def test_invalid_record_stops_the_read_by_default() -> None:
    stream = _stream((0, "LINE"), *line_tags(end=("1.0", "2.0", "0.0")), (0, "EOF"))

    with pytest.raises(DegenerateGeometry):
        dxfrec.read_stream(stream, DXFVersion.R12)


def test_skip_invalid_collects_errors_and_resumes() -> None:
    stream = _stream(
        (0, "LINE"),
        *line_tags(end=("1.0", "2.0", "0.0")),
        (0, "LINE"),
        (10, "not a number"),
        (20, "1.0"),
        (0, "LINE"),
        *line_tags(),
        (0, "EOF"),
    )

    doc = dxfrec.read_stream(stream, DXFVersion.R12, skip_invalid=True)

    assert [record.dxf["end"] for record in doc] == [(3.0, 4.0, 0.0)]
    assert [type(error) for error in doc.errors] == [DegenerateGeometry, Malformed]


def test_skip_invalid_resynchronises_after_bad_code_lines() -> None:
    text = (
        dxf_text((0, "LINE"), (8, "0"))
        + "abc\nfoo\n"
        + dxf_text((10, "1.0"), (0, "LINE"), *line_tags(), (0, "EOF"))
    )

    doc = dxfrec.read_stream(io.StringIO(text), DXFVersion.R12, skip_invalid=True)

    assert [record.dxf["start"] for record in doc] == [(1.0, 2.0, 0.0)]
    assert [type(error) for error in doc.errors] == [Malformed]
    assert doc.errors[0].line_number == 5


def test_stray_tag_before_header_is_malformed() -> None:
    with pytest.raises(Malformed):
        dxfrec.read_stream(_stream((8, "0"), (0, "LINE"), *line_tags()), DXFVersion.R12)


def test_io_failure_propagates_with_skip_invalid() -> None:
    class _Broken(io.StringIO):
        def readline(self, *args):
            raise OSError("unplugged")

    with pytest.raises(IoFailure):
        dxfrec.read_stream(_Broken(), DXFVersion.R12, name="usb.dxf", skip_invalid=True)


def test_query_filters_by_type_and_alias() -> None:
    doc = dxfrec.Document(
        version="R2000",
        records=[
            dxfrec.new("LINE", start=(0, 0), end=(1, 0)),
            dxfrec.new("ACAD_PROXY_ENTITY"),
            dxfrec.new("LAYER", name="0"),
        ],
    )

    assert [r.dxftype for r in doc.query("3DLINE")] == ["LINE"]
    assert [r.dxftype for r in doc.query("ACAD_ZOMBIE_ENTITY, LAYER")] == ["ACAD_PROXY_ENTITY", "LAYER"]
    assert [r.dxftype for r in doc.query("LA*")] == ["LAYER"]
    assert len(list(doc.query())) == 3
    assert len(list(doc.query("*"))) == 3


def test_query_rejects_unknown_types() -> None:
    doc = dxfrec.Document(version=DXFVersion.R2000)

    with pytest.raises(ValueError):
        list(doc.query("CIRCLE"))


def test_write_and_read_file(tmp_path: Path) -> None:
    path = tmp_path / "out" / "entities.dxf"
    path.parent.mkdir()
    records = [
        dxfrec.new("LINE", handle=0x20, start=(0, 0, 0), end=(1, 1, 1)),
        dxfrec.new("LWPOLYLINE", vertices=[(0, 0), (2, 0), (2, 2)], flags=1),
    ]

    count = dxfrec.write(path, records, "R2000")
    doc = dxfrec.read(path, "R2000")

    assert path.read_text(encoding="utf-8").endswith("  0\nENDSEC\n")
    assert count == sum(1 + len(list(dxfrec.encode(r, "R2000"))) for r in records) + 1
    assert doc.records == records


def test_write_without_terminator() -> None:
    out = io.StringIO()

    dxfrec.write(out, [dxfrec.new("LINE", start=(0, 0), end=(1, 0))], DXFVersion.R12, terminator=None)

    assert "ENDSEC" not in out.getvalue()
    assert out.getvalue().startswith("  0\nLINE\n")


def test_document_write_uses_its_version() -> None:
    doc = dxfrec.Document(version="R11", records=[dxfrec.new("LINE", start=(0, 0), end=(1, 0))])
    out = io.StringIO()

    doc.write(out)

    assert out.getvalue().startswith("  0\n3DLINE\n")
