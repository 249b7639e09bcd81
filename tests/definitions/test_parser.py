"""Tests for msggen.definitions.parser."""

from __future__ import annotations

import pytest

from msggen.definitions.parser import (
    ConstantSpec,
    FieldSpec,
    iter_references,
    parse_definition,
    parse_line,
    parse_type,
)
from msggen.errors import MalformedDefinitionError


def test_parse_type_handles_primitives_arrays_and_packages() -> None:
    primitive = parse_type("float64", "pkgA")
    assert primitive.is_primitive
    assert primitive.full_name == "float64"

    local = parse_type("Point[]", "pkgA")
    assert local.full_name == "pkgA/Point"
    assert local.is_array is True
    assert local.array_length is None

    qualified = parse_type("geometry_msgs/Pose[4]", "pkgA")
    assert qualified.full_name == "geometry_msgs/Pose"
    assert qualified.array_length == 4


def test_unqualified_header_belongs_to_std_msgs() -> None:
    assert parse_type("Header", "pkgA").full_name == "std_msgs/Header"


def test_parse_line_skips_blank_and_comment_lines() -> None:
    assert parse_line("", "pkgA") is None
    assert parse_line("   # just a comment", "pkgA") is None


def test_parse_line_strips_trailing_comments_from_fields() -> None:
    spec = parse_line("float64 x  # metres", "pkgA")
    assert isinstance(spec, FieldSpec)
    assert spec.name == "x"


def test_parse_line_reads_constants() -> None:
    spec = parse_line("int32 MAX = 10  # upper bound", "pkgA")
    assert isinstance(spec, ConstantSpec)
    assert spec.name == "MAX"
    assert spec.value == "10"


def test_string_constants_keep_hash_characters() -> None:
    spec = parse_line("string GREETING=hello # world", "pkgA")
    assert isinstance(spec, ConstantSpec)
    assert spec.value == "hello # world"


@pytest.mark.parametrize(
    "line",
    [
        "float64",
        "float64 1x",
        "Point[x] p",
        "pkgA/Point ORIGIN=0",
        "---",
    ],
)
def test_malformed_lines_raise(line: str) -> None:
    with pytest.raises(MalformedDefinitionError):
        parse_line(line, "pkgA")


def test_parse_definition_reports_line_numbers() -> None:
    with pytest.raises(MalformedDefinitionError) as excinfo:
        parse_definition("float64 x\nbogus\n", "pkgA")
    assert "line 2" in str(excinfo.value)


def test_separator_is_only_accepted_for_services() -> None:
    text = "int64 a\n---\nint64 sum\n"
    with pytest.raises(MalformedDefinitionError):
        parse_definition(text, "pkgA")

    parsed = parse_definition(text, "pkgA", allow_separator=True)
    assert [spec.name for spec in parsed.fields] == ["a", "sum"]


def test_second_separator_is_rejected_for_services() -> None:
    with pytest.raises(MalformedDefinitionError) as excinfo:
        parse_definition("int32 a\n---\nint32 b\n---\nint32 c\n", "pkgA", allow_separator=True)
    assert "line 4" in str(excinfo.value)


def test_iter_references_is_first_seen_and_unique() -> None:
    text = "Point a\nfloat64 w\nother/Line l\nPoint b\nHeader header\n"
    assert list(iter_references(text, "pkgA")) == [
        "pkgA/Point",
        "other/Line",
        "std_msgs/Header",
    ]
