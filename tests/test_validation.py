from __future__ import annotations

import pytest

from dxfrec.config import Config
from dxfrec.errors import DiagnosticKind, Malformed, VersionMismatch
from dxfrec.schema import new
from dxfrec.validation import finalize
from dxfrec.versions import DXFVersion


def test_fill_values_are_replaced_by_defaults() -> None:
    attrib = new("ATTRIB", insert=(1.0, 0.0, 0.0), text="v", tag="T", height=0.0, width=0.0, style="")

    finalize(attrib)

    assert attrib.dxf["height"] == 1.0
    assert attrib.dxf["width"] == 1.0
    assert attrib.dxf["style"] == "STANDARD"


def test_collapsed_alignment_is_reset(log_messages) -> None:
    attrib = new(
        "ATTRIB",
        insert=(2.0, 3.0, 0.0),
        align_point=(2.0, 3.0, 0.0),
        text="v",
        tag="T",
        halign=4,
        valign=1,
    )

    finalize(attrib)

    assert attrib.dxf["halign"] == 0
    assert attrib.dxf["valign"] == 0
    assert len(attrib.diagnostics_of(DiagnosticKind.OUT_OF_RANGE)) == 1
    assert any(m.startswith("WARNING") and "alignment" in m for m in log_messages)


def test_unused_alignment_point_is_reported(log_messages) -> None:
    attrib = new("ATTRIB", insert=(1.0, 1.0, 0.0), align_point=(4.0, 1.0, 0.0), text="v", tag="T")

    finalize(attrib)

    (diagnostic,) = attrib.diagnostics_of(DiagnosticKind.OUT_OF_RANGE)
    assert diagnostic.code == 11
    assert attrib.dxf["align_point"] == (4.0, 1.0, 0.0)
    assert any(m.startswith("WARNING") and "alignment point is not written" in m for m in log_messages)


def test_attdef_accepts_empty_default_value() -> None:
    attdef = new("ATTDEF", tag="ROOM", prompt="Room number?")

    finalize(attdef)

    assert attdef.dxf["text"] == ""


@pytest.mark.parametrize("dxftype", ["LAYER", "LTYPE", "STYLE", "VIEW", "VPORT"])
def test_table_entries_need_a_name(dxftype) -> None:
    with pytest.raises(Malformed):
        finalize(new(dxftype))


def test_lenient_mode_reports_out_of_range_values() -> None:
    face = new("3DFACE", invisible_edges=16)

    finalize(face, config=Config(strict_values=False))

    (diagnostic,) = face.diagnostics_of(DiagnosticKind.OUT_OF_RANGE)
    assert diagnostic.code == 70
    assert diagnostic.value == "16"


def test_imagedef_units_use_value_set() -> None:
    with pytest.raises(Malformed):
        finalize(new("IMAGEDEF", filename="scan.png", resolution_units=3))
    assert finalize(new("IMAGEDEF", filename="scan.png", resolution_units=5)).dxf["resolution_units"] == 5


def test_minimum_version_is_a_diagnostic_by_default() -> None:
    mline = new("MLINE")

    finalize(mline, DXFVersion.R12)

    assert len(mline.diagnostics_of(DiagnosticKind.VERSION_GATED)) == 1


def test_minimum_version_is_enforced_with_strict_versions() -> None:
    with pytest.raises(VersionMismatch) as excinfo:
        finalize(new("GROUP"), DXFVersion.R12, config=Config(strict_versions=True))
    assert excinfo.value.dxftype == "GROUP"
    assert excinfo.value.version == DXFVersion.R12


def test_finalize_without_version_skips_version_rules() -> None:
    record = finalize(new("IMAGEDEF_REACTOR", image="3C"))

    assert record.diagnostics == []


def test_oversized_lists_are_rejected() -> None:
    group = new("GROUP", entities=["1A", "1B", "1C"])

    with pytest.raises(Malformed):
        finalize(group, config=Config(max_repeat=2))
