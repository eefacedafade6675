from __future__ import annotations

from typing import TYPE_CHECKING

from parse.annotations import TagKind
from parse.declarations import parse_source_unit, read_source_unit

if TYPE_CHECKING:
    from pathlib import Path


def test_top_level_declarations_and_kinds() -> None:
    text = (
        "add <- function(x, y = 1) {\n"
        "  inner <- function(z) z\n"
        "  x + y\n"
        "}\n"
        "limit = 10\n"
        "`%+%` <- function(a, b) paste(a, b)\n"
        '"rainfall"\n'
    )

    unit = parse_source_unit("R/a.R", text).unit

    assert [(d.name, d.kind) for d in unit.declarations] == [
        ("add", "function"),
        ("limit", "constant"),
        ("%+%", "function"),
        ("rainfall", "dataset"),
    ]
    add = unit.declarations[0]
    assert add.arguments == ("x", "y")
    assert add.usage == "add(x, y = 1)"
    assert add.line == 1
    assert unit.declarations[2].usage == "`%+%`(a, b)"


def test_multiline_signature_with_comments() -> None:
    text = (
        "summarise <- function(data,  # the input\n"
        '                      sep = "#",\n'
        "                      ...) {\n"
        "  data\n"
        "}\n"
    )

    unit = parse_source_unit("R/s.R", text).unit

    (decl,) = unit.declarations
    assert decl.arguments == ("data", "sep", "...")
    assert decl.usage == 'summarise(data, sep = "#", ...)'


def test_byte_range_counts_utf8_bytes() -> None:
    text = '# café\nf <- function(x) {\n  x\n}\n'

    unit = parse_source_unit("R/f.R", text).unit

    (decl,) = unit.declarations
    header_start = len("# café\n".encode("utf-8"))
    assert decl.start_byte == header_start
    assert decl.end_byte == header_start + len(b"f <- function(x)")


def test_block_attaches_to_following_declaration() -> None:
    text = "#' Title here\n#' @export\nf <- function() NULL\n"

    result = parse_source_unit("R/f.R", text)

    (decl,) = result.unit.declarations
    assert decl.block is not None
    assert decl.block.line == 1
    assert decl.block.first(TagKind.EXPORT) is not None
    assert result.warnings == ()


def test_detached_blocks_after_sentinels() -> None:
    text = (
        "#' @importFrom pkgA foo\n"
        "NULL\n"
        "\n"
        "#' @export helper\n"
        '"_PACKAGE"\n'
    )

    unit = parse_source_unit("R/pkg.R", text).unit

    assert unit.declarations == ()
    assert len(unit.detached) == 2
    assert unit.detached[1].first(TagKind.EXPORT) is not None


def test_orphan_block_warns() -> None:
    text = "#' Lost\n\nf <- function() NULL\n#' trailing\n"

    result = parse_source_unit("R/f.R", text)

    assert result.unit.declarations[0].block is None
    assert [w.subject for w in result.warnings] == ["R/f.R:1", "R/f.R:4"]
    assert all("not attached" in w.message for w in result.warnings)


def test_annotations_inside_bodies_are_ignored() -> None:
    text = "f <- function() {\n  #' @export\n  g <- 1\n}\n"

    result = parse_source_unit("R/f.R", text)

    assert [d.name for d in result.unit.declarations] == ["f"]
    assert result.warnings == ()


def test_custom_prefix_and_marker() -> None:
    text = "##' Title\n##' %export\nf <- function() NULL\n"

    unit = parse_source_unit("R/f.R", text, prefix="##'", marker="%").unit

    block = unit.declarations[0].block
    assert block is not None
    assert block.first(TagKind.EXPORT) is not None


def test_read_source_unit_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "bad.R"
    path.write_bytes(b"f <- function() '\xff'\n")

    result = read_source_unit(path, "R/bad.R")

    assert result.unit.declarations == ()
    assert len(result.errors) == 1
    assert result.errors[0].subject == "R/bad.R:1"
    assert "not valid UTF-8" in str(result.errors[0])


def test_read_source_unit_strips_bom(tmp_path: Path) -> None:
    path = tmp_path / "bom.R"
    path.write_bytes(b"\xef\xbb\xbff <- function() NULL\n")

    result = read_source_unit(path, "R/bom.R")

    assert [d.name for d in result.unit.declarations] == ["f"]


def test_byte_offsets_count_the_bom(tmp_path: Path) -> None:
    source = b"x <- 1\nf <- function() NULL\n"
    plain = tmp_path / "plain.R"
    plain.write_bytes(source)
    marked = tmp_path / "marked.R"
    marked.write_bytes(b"\xef\xbb\xbf" + source)

    (plain_x, plain_f) = read_source_unit(plain, "R/plain.R").unit.declarations
    (marked_x, marked_f) = read_source_unit(marked, "R/marked.R").unit.declarations

    assert marked_x.start_byte == plain_x.start_byte + 3 == 3
    assert marked_f.start_byte == plain_f.start_byte + 3
    assert marked_f.end_byte == plain_f.end_byte + 3
