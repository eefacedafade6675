from __future__ import annotations

import pytest

from contract.errors import MalformedAnnotation
from parse.annotations import (
    FormatSpec,
    ImportSpec,
    ParamSpec,
    TagKind,
    parse_annotation_block,
    parse_format,
    parse_import_from,
)


def _lines(*contents: str, start: int = 1) -> list[tuple[int, str]]:
    return [(start + offset, content) for offset, content in enumerate(contents)]


def test_intro_paragraphs_become_title_and_description() -> None:
    result = parse_annotation_block(
        _lines(
            "Add two numbers",
            "",
            "First paragraph",
            "continues here.",
            "",
            "Second paragraph.",
            "@export",
        ),
        path="R/add.R",
    )

    block = result.block
    title = block.first(TagKind.TITLE)
    description = block.first(TagKind.DESCRIPTION)
    assert title is not None
    assert title.value == "Add two numbers"
    assert description is not None
    assert description.value == "First paragraph continues here.\n\nSecond paragraph."
    assert description.line == 3
    assert block.first(TagKind.EXPORT) is not None
    assert result.warnings == []
    assert result.errors == []


def test_explicit_title_turns_intro_into_description() -> None:
    result = parse_annotation_block(
        _lines(
            "Adds things up.",
            "",
            "More detail.",
            "@title Add numbers",
            "@title Again",
        ),
        path="R/add.R",
    )

    block = result.block
    assert [tag.value for tag in block.all(TagKind.TITLE)] == ["Add numbers"]
    description = block.first(TagKind.DESCRIPTION)
    assert description is not None
    assert description.value == "Adds things up.\n\nMore detail."
    assert description.line == 1
    assert len(result.warnings) == 1
    assert result.warnings[0].subject == "R/add.R:5"
    assert "duplicate @title ignored" in result.warnings[0].message


def test_structured_payloads() -> None:
    result = parse_annotation_block(
        _lines(
            "@param x   A number,",
            "  possibly negative.",
            "@importFrom pkgA foo bar",
            "@returns The sum.",
        ),
        path="R/add.R",
    )

    param = result.block.first(TagKind.PARAM)
    assert param is not None
    assert param.payload == ParamSpec(
        name="x", description="A number, possibly negative."
    )

    imports = result.block.first(TagKind.IMPORT_FROM)
    assert imports is not None
    assert imports.payload == ImportSpec(package="pkgA", symbols=("foo", "bar"))

    returns = result.block.first(TagKind.RETURN)
    assert returns is not None
    assert returns.key == "returns"
    assert returns.value == "The sum."


def test_unrecognized_tag_is_kept_with_warning() -> None:
    result = parse_annotation_block(_lines("@frobnicate yes"), path="R/a.R")

    assert [tag.kind for tag in result.block.tags] == [TagKind.UNRECOGNIZED]
    assert len(result.warnings) == 1
    assert result.warnings[0].subject == "R/a.R:1"
    assert "unrecognized tag @frobnicate" in result.warnings[0].message


def test_malformed_import_is_reported_and_dropped() -> None:
    result = parse_annotation_block(
        _lines("@importFrom onlypackage", "@export", start=5), path="R/a.R"
    )

    assert len(result.errors) == 1
    err = result.errors[0]
    assert isinstance(err, MalformedAnnotation)
    assert err.location.line == 5
    assert "malformed @importFrom" in str(err)
    assert [tag.kind for tag in result.block.tags] == [TagKind.EXPORT]


def test_examples_keep_indentation() -> None:
    result = parse_annotation_block(
        _lines("@examples", "if (TRUE) {", "  add(1, 2)", "}", ""), path="R/a.R"
    )

    examples = result.block.first(TagKind.EXAMPLES)
    assert examples is not None
    assert examples.value == "if (TRUE) {\n  add(1, 2)\n}"


def test_email_like_text_is_not_a_tag() -> None:
    result = parse_annotation_block(
        _lines("Contact", "", "Mail maintainer@example.org for help."), path="R/a.R"
    )

    assert [tag.kind for tag in result.block.tags] == [
        TagKind.TITLE,
        TagKind.DESCRIPTION,
    ]


def test_parse_format_table_with_columns() -> None:
    spec = parse_format(
        "A data frame with 1,200 rows and 2 columns:\n"
        "- month: Month name\n"
        "- mm: Rainfall\n"
        "  in millimetres"
    )

    assert spec == FormatSpec(
        container="A data frame",
        rows=1200,
        columns=2,
        items=spec.items,
    )
    assert [(item.name, item.description) for item in spec.items] == [
        ("month", "Month name"),
        ("mm", "Rainfall in millimetres"),
    ]


def test_parse_format_vector() -> None:
    spec = parse_format("A character vector of length 26.")

    assert spec.length == 26
    assert spec.rows is None
    assert spec.describe() == "A character vector of length 26"


def test_parse_format_rejects_unknown_shape() -> None:
    with pytest.raises(ValueError, match="cannot parse shape"):
        parse_format("Some data")


def test_column_count_mismatch_warns() -> None:
    result = parse_annotation_block(
        _lines("@format A tibble with 3 rows and 2 columns:", "- a: first"),
        path="R/data.R",
    )

    assert result.errors == []
    assert len(result.warnings) == 1
    assert "declares 2 columns but describes 1" in result.warnings[0].message


@pytest.mark.parametrize("value", ["pkgA", "", "9pkg foo"])
def test_parse_import_from_rejects(value: str) -> None:
    with pytest.raises(ValueError):
        parse_import_from(value)
