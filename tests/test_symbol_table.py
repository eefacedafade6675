from __future__ import annotations

import pytest

from artifacts.generators.symbols import SymbolsGenerator
from contract.errors import DuplicateSymbol, SourceLocation
from parse.declarations import SourceUnit, parse_source_unit


def _unit(path: str, text: str) -> SourceUnit:
    return parse_source_unit(path, text).unit


def test_records_carry_documentation_fields() -> None:
    unit = _unit(
        "R/add.R",
        "#' Add numbers\n"
        "#'\n"
        "#' Adds them.\n"
        "#' @param x First.\n"
        "#' @param y Second.\n"
        "#' @return The sum.\n"
        "#' @seealso helper\n"
        "#' @keywords math arith\n"
        "#' @export\n"
        "add <- function(x, y) x + y\n",
    )

    table = SymbolsGenerator().generate([unit])

    record = table.records["add"]
    assert record.exported is True
    assert record.documented is True
    assert record.title == "Add numbers"
    assert record.description == "Adds them."
    assert [p.name for p in record.params] == ["x", "y"]
    assert record.returns == "The sum."
    assert record.seealso == ["helper"]
    assert record.keywords == ["math", "arith"]
    assert record.location == "R/add.R:10"
    assert table.warnings == ()


def test_unannotated_symbol_is_internal_and_undocumented() -> None:
    table = SymbolsGenerator().generate([_unit("R/h.R", "helper <- function(x) x\n")])

    record = table.records["helper"]
    assert record.exported is False
    assert record.documented is False


def test_duplicate_across_units_reports_path_order() -> None:
    first = _unit("R/a.R", "f <- function() 1\n")
    second = _unit("R/b.R", "\nf <- function() 2\n")

    with pytest.raises(DuplicateSymbol) as exc_info:
        SymbolsGenerator().generate([second, first])

    err = exc_info.value
    assert err.first == SourceLocation("R/a.R", 1)
    assert err.second == SourceLocation("R/b.R", 2)
    assert err.to_diagnostic().subject == "f"


def test_ordinals_follow_path_then_declaration_order() -> None:
    units = [
        _unit("R/z.R", "z1 <- 1\nz2 <- 2\n"),
        _unit("R/a.R", "a1 <- 1\n"),
    ]

    table = SymbolsGenerator().generate(units)

    assert [(r.name, r.ordinal) for r in table] == [("a1", 0), ("z1", 1), ("z2", 2)]


def test_param_mismatch_warnings() -> None:
    unit = _unit(
        "R/f.R",
        "#' F\n#' @param x Documented.\n#' @param q Not an argument.\n"
        "f <- function(x, y) NULL\n",
    )

    table = SymbolsGenerator().generate([unit])

    messages = [w.message for w in table.warnings]
    assert "@param q does not match any argument" in messages
    assert "argument 'y' is not documented" in messages


def test_dataset_without_shape_warns() -> None:
    unit = _unit("R/data.R", "#' Rainfall\n\"rainfall\"\n")

    table = SymbolsGenerator().generate([unit])

    assert table.records["rainfall"].shape is None
    assert [w.message for w in table.warnings] == [
        "dataset has no @format shape description"
    ]


def test_out_of_band_export_and_detached_imports() -> None:
    units = [
        _unit("R/pkg.R", "#' @export helper\n#' @importFrom pkgA foo\nNULL\n"),
        _unit("R/h.R", "helper <- function() NULL\n"),
    ]

    table = SymbolsGenerator().generate(units)

    assert table.records["helper"].exported is True
    assert [r.name for r in table.export_requests] == ["helper"]
    assert [(s.ref.package, s.ref.symbol) for s in table.import_sites] == [
        ("pkgA", "foo")
    ]


def test_export_false_keeps_symbol_internal() -> None:
    unit = _unit("R/f.R", "#' F\n#' @export false\nf <- function() NULL\n")

    table = SymbolsGenerator().generate([unit])

    assert table.records["f"].exported is False
    assert table.export_requests == ()
