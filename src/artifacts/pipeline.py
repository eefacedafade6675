"""In-memory synthesis pipeline.

Every artifact is rendered to bytes before anything touches the disk, so a
failure in any stage leaves the output directory as it was.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from artifacts.generators import (
    DepsGenerator,
    DocsGenerator,
    ManifestGenerator,
    NamespaceGenerator,
    SymbolsGenerator,
)
from artifacts.generators.manifest import (
    declared_dependencies,
    read_manifest,
    render_manifest,
)
from artifacts.generators.namespace import render_namespace
from artifacts.utils import _get_output_dir_name
from contract.artifacts import MANIFEST_FILE, NAMESPACE_FILE
from contract.errors import SynthError, SynthesisFailed
from parse.declarations import read_source_unit
from scan.files import find_source_units
from utils import relative_posix

if TYPE_CHECKING:
    from pathlib import Path

    from artifacts.context import RunContext
    from artifacts.generators.deps import DependencySet
    from artifacts.generators.docs import DocPage
    from artifacts.generators.symbols import SymbolTable
    from artifacts.models.artifacts.manifest import ManifestRecord
    from artifacts.models.artifacts.namespace import NamespaceDescriptor
    from parse.declarations import SourceUnit, UnitParse
    from report.diagnostics import Diagnostic

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Synthesis:
    """Result of one full run, with every artifact rendered in memory."""

    context: RunContext
    units: tuple[SourceUnit, ...]
    table: SymbolTable
    deps: DependencySet
    namespace: NamespaceDescriptor
    manifest: ManifestRecord
    pages: tuple[DocPage, ...]
    artifacts: dict[str, bytes] = field(default_factory=dict)
    warnings: tuple[Diagnostic, ...] = ()


def _source_paths(context: RunContext) -> list[Path]:
    config = context.config
    output_dir_name = _get_output_dir_name(context.out_dir, context.root)
    return list(
        find_source_units(
            context.root,
            extensions=config.source_extensions,
            skip_dirs=(output_dir_name,) if output_dir_name else (),
            include_patterns=config.include,
            exclude_patterns=config.exclude,
            nested_gitignore=config.nested_gitignore,
        )
    )


def parse_units(context: RunContext) -> list[UnitParse]:
    """Parse every source unit on a thread pool, in relative-path order."""
    config = context.config
    paths = _source_paths(context)

    def _parse(path: Path) -> UnitParse:
        return read_source_unit(
            path,
            relative_posix(path, context.root),
            prefix=config.annotation_prefix,
            marker=config.tag_marker,
        )

    with ThreadPoolExecutor(max_workers=config.workers) as pool:
        results = list(pool.map(_parse, paths))
    return sorted(results, key=lambda result: result.unit.path)


def synthesize(context: RunContext) -> Synthesis:
    """Run every stage and render all artifacts without writing.

    Raises:
        SynthesisFailed: With every parse error after stage 1, or with the
            first structural error of a later stage. Warnings gathered so far
            travel with it.
    """
    config = context.config
    parsed = parse_units(context)
    warnings: list[Diagnostic] = [w for result in parsed for w in result.warnings]
    parse_errors = [err for result in parsed for err in result.errors]
    if parse_errors:
        raise SynthesisFailed(parse_errors, warnings)

    units = tuple(result.unit for result in parsed)
    logger.info("source_units_parsed", units=len(units), root=str(context.root))

    try:
        table = SymbolsGenerator().generate(units)
        warnings.extend(table.warnings)

        prior = read_manifest(context.manifest_path)
        if prior is None and context.out_dir != context.root:
            prior = read_manifest(context.root / MANIFEST_FILE)
        declared = declared_dependencies(prior)
        whitelist = set(config.known_packages) | {ref.package for ref in declared}
        deps = DepsGenerator().generate(
            table, declared=declared, strict=context.strict, whitelist=whitelist
        )
        warnings.extend(deps.warnings)

        namespace = NamespaceGenerator().generate(table, deps)
        manifest = ManifestGenerator().generate(context, prior, deps)
        pages = DocsGenerator().generate(
            table,
            docs_dir=context.docs_dir,
            stubs_for_undocumented=config.docs.stubs_for_undocumented,
        )
    except SynthError as exc:
        raise SynthesisFailed([exc], warnings) from exc

    artifacts: dict[str, bytes] = {
        MANIFEST_FILE: render_manifest(manifest).encode("utf-8"),
        NAMESPACE_FILE: render_namespace(namespace).encode("utf-8"),
    }
    for page in pages:
        artifacts[page.relative_path] = page.text.encode("utf-8")

    logger.info(
        "synthesis_complete",
        symbols=len(table),
        exports=len(namespace.exports),
        imports=len(namespace.imports),
        pages=len(pages),
        warnings=len(warnings),
    )
    return Synthesis(
        context=context,
        units=units,
        table=table,
        deps=deps,
        namespace=namespace,
        manifest=manifest,
        pages=tuple(pages),
        artifacts=artifacts,
        warnings=tuple(warnings),
    )


__all__ = ["Synthesis", "parse_units", "synthesize"]
