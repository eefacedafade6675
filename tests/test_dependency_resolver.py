from __future__ import annotations

import pytest

from artifacts.generators.deps import DepsGenerator
from artifacts.generators.symbols import SymbolsGenerator, SymbolTable
from artifacts.models.artifacts.dependencies import DependencyRef
from contract.errors import UnknownPackageReference
from parse.declarations import parse_source_unit


def _table(*units: tuple[str, str]) -> SymbolTable:
    return SymbolsGenerator().generate(
        [parse_source_unit(path, text).unit for path, text in units]
    )


def test_duplicate_import_collapses_to_one_ref() -> None:
    table = _table(
        ("R/a.R", "#' A\n#' @importFrom pkgA foo\na <- function() NULL\n"),
        ("R/b.R", "#' B\n#' @importFrom pkgA foo\nb <- function() NULL\n"),
    )

    deps = DepsGenerator().generate(
        table, declared=[DependencyRef(package="pkgA")]
    )

    assert [(ref.package, ref.symbol) for ref in deps.refs] == [
        ("pkgA", None),
        ("pkgA", "foo"),
    ]
    assert len(deps.warnings) == 1
    assert deps.warnings[0].subject == "pkgA::foo"
    assert "first declared at R/a.R:2" in deps.warnings[0].message


def test_refs_sorted_by_package_then_symbol() -> None:
    table = _table(
        (
            "R/a.R",
            "#' A\n#' @importFrom zeta b a\n#' @importFrom alpha x\n"
            "a <- function() NULL\n",
        ),
    )

    deps = DepsGenerator().generate(table)

    assert [ref.key for ref in deps.refs] == [
        ("alpha", "x"),
        ("zeta", "a"),
        ("zeta", "b"),
    ]
    assert deps.packages == ["alpha", "zeta"]


def test_undeclared_package_warns_outside_strict_mode() -> None:
    table = _table(("R/a.R", "#' A\n#' @importFrom pkgB bar\na <- 1\n"))

    deps = DepsGenerator().generate(table)

    assert [ref.key for ref in deps.refs] == [("pkgB", "bar")]
    assert [w.subject for w in deps.warnings] == ["pkgB"]
    assert "not declared in the manifest" in deps.warnings[0].message


def test_strict_mode_rejects_unknown_package() -> None:
    table = _table(
        ("R/a.R", "#' A\n#' @importFrom zzz bar\na <- 1\n"),
        ("R/b.R", "#' B\n#' @importFrom pkgB bar\nb <- 1\n"),
    )

    with pytest.raises(UnknownPackageReference) as exc_info:
        DepsGenerator().generate(table, strict=True)

    assert exc_info.value.package == "pkgB"
    assert str(exc_info.value.location) == "R/b.R:2"


def test_strict_mode_accepts_whitelisted_package() -> None:
    table = _table(("R/a.R", "#' A\n#' @importFrom pkgB bar\na <- 1\n"))

    deps = DepsGenerator().generate(table, strict=True, whitelist={"pkgB"})

    assert deps.warnings == ()
    assert [ref.key for ref in deps.refs] == [("pkgB", "bar")]


def test_declared_constraint_is_kept() -> None:
    deps = DepsGenerator().generate(
        _table(),
        declared=[
            DependencyRef(package="pkgA", constraint=">= 1.0"),
            DependencyRef(package="pkgA"),
        ],
    )

    assert [ref.constraint for ref in deps.refs] == [">= 1.0"]
    assert [w.message for w in deps.warnings] == [
        "listed more than once in the manifest"
    ]
