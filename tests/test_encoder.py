from __future__ import annotations

import io

import pytest

from dxfrec.config import Config
from dxfrec.encoder import encode, write_record
from dxfrec.errors import DegenerateGeometry, Malformed, VersionMismatch
from dxfrec.schema import new
from dxfrec.tags import Tag, TagWriter
from dxfrec.versions import DXFVersion

ALL_VERSIONS = list(DXFVersion)


def _line(**dxfattribs):
    return new("LINE", start=(1.0, 2.0, 0.0), end=(3.0, 4.0, 0.0), **dxfattribs)


@pytest.mark.parametrize("version", ALL_VERSIONS)
def test_bylayer_color_is_never_written(version) -> None:
    tags = list(encode(_line(color=256), version))

    assert 62 not in [tag.code for tag in tags]


@pytest.mark.parametrize("version", ALL_VERSIONS)
def test_explicit_color_is_written(version) -> None:
    tags = list(encode(_line(color=1), version))

    assert Tag(62, "1") in tags


def test_default_record_emits_only_required_fields_at_r12() -> None:
    tags = list(encode(_line(), DXFVersion.R12))

    assert tags == [
        Tag(8, "0"),
        Tag(10, "1.000000"),
        Tag(20, "2.000000"),
        Tag(30, "0.000000"),
        Tag(11, "3.000000"),
        Tag(21, "4.000000"),
        Tag(31, "0.000000"),
    ]


def test_markers_and_handle_at_r2000() -> None:
    tags = list(encode(_line(handle=0x2A), DXFVersion.R2000))

    assert tags[:4] == [
        Tag(5, "2a"),
        Tag(100, "AcDbEntity"),
        Tag(8, "0"),
        Tag(100, "AcDbLine"),
    ]
    assert 0 not in [tag.code for tag in tags]


def test_version_gated_fields_are_not_written() -> None:
    record = _line(linetype_scale=2.0, elevation=5.0)

    r11 = list(encode(record, DXFVersion.R11))
    r2000 = list(encode(record, DXFVersion.R2000))

    assert Tag(38, "5.000000") in r11
    assert 48 not in [tag.code for tag in r11]
    assert 38 not in [tag.code for tag in r2000]
    assert Tag(48, "2.000000") in r2000


def test_elevation_and_color_order_follows_entity() -> None:
    line = _line(elevation=5.0, color=2)
    face = new("3DFACE", second=(1.0, 0.0, 0.0), third=(1.0, 1.0, 0.0), elevation=5.0, color=2)

    line_codes = [tag.code for tag in encode(line, DXFVersion.R11)]
    face_codes = [tag.code for tag in encode(face, DXFVersion.R11)]

    assert line_codes.index(38) < line_codes.index(62)
    assert face_codes.index(62) < face_codes.index(38)


def test_owner_handle_is_wrapped_in_app_group() -> None:
    tags = list(encode(_line(owner="1F"), DXFVersion.R2000))

    assert tags[:3] == [Tag(102, "{ACAD_REACTORS"), Tag(330, "1F"), Tag(102, "}")]
    assert 330 not in [tag.code for tag in encode(_line(owner="1F"), DXFVersion.R13)]


def test_degenerate_line_is_rejected_before_any_output() -> None:
    out = io.StringIO()
    record = new("LINE", start=(1.0, 1.0, 1.0), end=(1.0, 1.0, 1.0))

    with pytest.raises(DegenerateGeometry):
        write_record(TagWriter(out, "out.dxf"), record, DXFVersion.R2000)
    assert out.getvalue() == ""


def test_unwritable_value_is_malformed_before_any_output() -> None:
    out = io.StringIO()
    record = _line()
    record.dxf["thickness"] = "thick"

    with pytest.raises(Malformed) as excinfo:
        write_record(TagWriter(out, "out.dxf"), record, DXFVersion.R12)
    assert excinfo.value.code == 39
    assert out.getvalue() == ""


def test_zero_direction_xline_is_rejected() -> None:
    record = new("XLINE", unit_vector=(0.0, 0.0, 0.0))

    with pytest.raises(DegenerateGeometry):
        encode(record, DXFVersion.R2000)


def test_empty_layer_and_linetype_fall_back_to_defaults(log_messages) -> None:
    tags = list(encode(_line(layer="", linetype=""), DXFVersion.R12))

    assert Tag(8, "0") in tags
    assert 6 not in [tag.code for tag in tags]
    assert any(m.startswith("WARNING") and "layer" in m for m in log_messages)


def test_encode_does_not_mutate_the_record() -> None:
    record = _line(layer="")

    list(encode(record, DXFVersion.R12))

    assert record.dxf["layer"] == ""


def test_header_name_follows_version() -> None:
    out = io.StringIO()
    writer = TagWriter(out, "out.dxf")

    write_record(writer, _line(), DXFVersion.R11)
    write_record(writer, _line(), DXFVersion.R12)

    text = out.getvalue()
    assert text.startswith("  0\n3DLINE\n")
    assert "  0\nLINE\n" in text


def test_proxy_entity_is_zombie_at_r13() -> None:
    out = io.StringIO()
    record = new("ACAD_PROXY_ENTITY", object_ids=["B1", "B2"])

    write_record(TagWriter(out, "out.dxf"), record, DXFVersion.R13)

    text = out.getvalue()
    assert text.startswith("  0\nACAD_ZOMBIE_ENTITY\n")
    assert "100\nAcDbZombieEntity\n" in text
    assert "330\nB1\n330\nB2\n" in text


def test_counts_are_derived_from_lists() -> None:
    record = new("LWPOLYLINE", vertices=[(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)], flags=1)

    tags = list(encode(record, DXFVersion.R2000))

    assert Tag(90, "3") in tags
    assert [tag.value for tag in tags if tag.code == 10] == ["0.000000", "1.000000", "1.000000"]
    assert [tag.value for tag in tags if tag.code == 20] == ["0.000000", "0.000000", "1.000000"]
    assert 30 not in [tag.code for tag in tags]


def test_attrib_alignment_point_only_when_aligned() -> None:
    plain = new("ATTRIB", insert=(1.0, 1.0, 0.0), text="v", tag="T")
    aligned = new("ATTRIB", insert=(1.0, 1.0, 0.0), text="v", tag="T", halign=1, align_point=(4.0, 1.0, 0.0))

    assert 11 not in [tag.code for tag in encode(plain, DXFVersion.R12)]
    aligned_tags = list(encode(aligned, DXFVersion.R12))
    assert Tag(72, "1") in aligned_tags
    assert Tag(11, "4.000000") in aligned_tags


def test_attrib_requires_tag() -> None:
    record = new("ATTRIB", insert=(1.0, 1.0, 0.0), text="v")

    with pytest.raises(Malformed):
        encode(record, DXFVersion.R12)


def test_out_of_range_value_is_rejected_by_default() -> None:
    record = new("ATTRIB", insert=(1.0, 1.0, 0.0), text="v", tag="T", halign=9)

    with pytest.raises(Malformed):
        encode(record, DXFVersion.R12)


def test_out_of_range_value_is_written_in_lenient_mode() -> None:
    record = new("ATTRIB", insert=(1.0, 1.0, 0.0), text="v", tag="T", halign=9, align_point=(2.0, 1.0, 0.0))

    tags = list(encode(record, DXFVersion.R12, config=Config(strict_values=False)))

    assert Tag(72, "9") in tags


def test_strict_versions_reject_types_newer_than_target() -> None:
    record = new("LWPOLYLINE", vertices=[(0.0, 0.0), (1.0, 0.0)])

    with pytest.raises(VersionMismatch):
        encode(record, DXFVersion.R12, config=Config(strict_versions=True))


def test_float_precision_is_configurable() -> None:
    tags = list(encode(_line(), DXFVersion.R12, config=Config(float_precision=2)))

    assert Tag(10, "1.00") in tags


def test_xrecord_data_follows_fields() -> None:
    record = new("XRECORD", handle=0x2B, data=[(1, "hello"), (40, 2.5), (70, 3)])

    tags = list(encode(record, DXFVersion.R2000))

    assert tags == [
        Tag(5, "2b"),
        Tag(100, "AcDbXrecord"),
        Tag(280, "1"),
        Tag(1, "hello"),
        Tag(40, "2.500000"),
        Tag(70, "3"),
    ]
