from __future__ import annotations

from pathlib import Path

import pytest

from artifacts.context import RunContext
from artifacts.generators.deps import DependencySet
from artifacts.generators.manifest import (
    ManifestGenerator,
    declared_dependencies,
    parse_manifest_text,
    read_manifest,
    render_manifest,
)
from artifacts.models.artifacts.dependencies import DependencyRef
from artifacts.models.artifacts.manifest import ManifestRecord
from contract.errors import InvalidManifestField
from rules.config import SynthConfig


def _context(root: Path) -> RunContext:
    return RunContext(root=root, out_dir=root, config=SynthConfig(), strict=False)


def test_parse_manifest_continuations() -> None:
    fields = parse_manifest_text(
        "Package: demopkg\n"
        "Description: First line\n"
        "    second line\n"
        "    .\n"
        "    after blank.\n"
        "Imports:\n"
        "    stats (>= 4.0),\n"
        "    utils\n"
    )

    assert fields["Description"] == "First line\nsecond line\n\nafter blank."
    assert fields["Imports"] == "\nstats (>= 4.0),\nutils"
    assert [ref.package for ref in declared_dependencies(fields)] == [
        "stats",
        "utils",
    ]
    assert declared_dependencies(fields)[0].constraint == ">= 4.0"


@pytest.mark.parametrize(
    "text",
    [
        "not a field line\n",
        "    leading continuation\n",
        "Package: a\nPackage: b\n",
    ],
)
def test_parse_manifest_syntax_errors(text: str) -> None:
    with pytest.raises(InvalidManifestField) as exc_info:
        parse_manifest_text(text)

    assert exc_info.value.field == "syntax"


def test_unparsable_dependency_entry() -> None:
    with pytest.raises(InvalidManifestField) as exc_info:
        declared_dependencies({"Imports": "stats >= 4.0"})

    assert exc_info.value.field == "dependencies"


def test_read_manifest_missing_file(tmp_path: Path) -> None:
    assert read_manifest(tmp_path / "DESCRIPTION") is None


def test_defaults_without_prior_manifest(tmp_path: Path) -> None:
    root = tmp_path / "demopkg"
    root.mkdir()

    record = ManifestGenerator().generate(_context(root), None, DependencySet(refs=()))

    assert record.identifier == "demopkg"
    assert record.version == "0.0.0.9000"
    assert record.title == "demopkg"
    assert record.license == "file LICENSE"
    assert render_manifest(record) == (
        "Package: demopkg\n"
        "Title: demopkg\n"
        "Version: 0.0.0.9000\n"
        "License: file LICENSE\n"
    )


def test_identifier_must_match_root(tmp_path: Path) -> None:
    root = tmp_path / "demopkg"
    root.mkdir()
    prior = {"Package": "otherpkg", "Version": "bad"}

    with pytest.raises(InvalidManifestField) as exc_info:
        ManifestGenerator().generate(_context(root), prior, DependencySet(refs=()))

    assert exc_info.value.field == "identifier"


@pytest.mark.parametrize(
    ("prior", "field"),
    [
        ({"Version": "1.0"}, "version"),
        ({"Version": "1.0.0", "License": " "}, "license"),
        ({"Version": "1.0.0", "Title": ""}, "title"),
    ],
)
def test_validation_order(tmp_path: Path, prior: dict[str, str], field: str) -> None:
    root = tmp_path / "demopkg"
    root.mkdir()

    with pytest.raises(InvalidManifestField) as exc_info:
        ManifestGenerator().generate(_context(root), prior, DependencySet(refs=()))

    assert exc_info.value.field == field


def test_self_dependency_rejected(tmp_path: Path) -> None:
    root = tmp_path / "demopkg"
    root.mkdir()
    deps = DependencySet(refs=(DependencyRef(package="demopkg", symbol="f"),))

    with pytest.raises(InvalidManifestField) as exc_info:
        ManifestGenerator().generate(_context(root), None, deps)

    assert exc_info.value.field == "dependencies"


def test_render_orders_fields_and_lists_imports() -> None:
    record = ManifestRecord(
        identifier="demopkg",
        version="1.2.3",
        title="Demo",
        license="MIT",
        description="One.\n\nTwo.",
        fields={"Zeta": "last", "Authors@R": 'person("A", "B")', "Alpha": "x"},
        dependencies=[
            DependencyRef(package="stats", constraint=">= 4.0"),
            DependencyRef(package="stats", symbol="median"),
            DependencyRef(package="utils", symbol="head"),
        ],
    )

    assert render_manifest(record) == (
        "Package: demopkg\n"
        "Title: Demo\n"
        "Version: 1.2.3\n"
        'Authors@R: person("A", "B")\n'
        "Description: One.\n"
        "    .\n"
        "    Two.\n"
        "License: MIT\n"
        "Imports:\n"
        "    stats (>= 4.0),\n"
        "    utils\n"
        "Alpha: x\n"
        "Zeta: last\n"
    )


def test_render_is_stable_through_parse() -> None:
    text = (
        "Package: demopkg\n"
        "Title: Demo\n"
        "Version: 1.2.3\n"
        "Description: One.\n"
        "    .\n"
        "    Two.\n"
        "License: MIT\n"
    )
    fields = parse_manifest_text(text)
    record = ManifestRecord(
        identifier=fields["Package"],
        version=fields["Version"],
        title=fields["Title"],
        license=fields["License"],
        description=fields["Description"],
    )

    assert render_manifest(record) == text
