"""Symbol table builder."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from artifacts.models.artifacts.dependencies import DependencyRef
from artifacts.models.artifacts.symbols import (
    ColumnDoc,
    ParamDoc,
    ShapeDoc,
    SymbolRecord,
)
from contract.errors import DuplicateSymbol, SourceLocation
from parse.annotations import FormatSpec, ImportSpec, ParamSpec, TagKind
from report.diagnostics import Diagnostic, warning

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from parse.annotations import AnnotationBlock
    from parse.declarations import Declaration, SourceUnit

logger = structlog.get_logger(__name__)

_SELF_EXPORT_VALUES = frozenset({"", "true"})


@dataclass(frozen=True)
class ExportRequest:
    """An ``export`` tag naming a symbol other than the one it annotates."""

    name: str
    location: SourceLocation


@dataclass(frozen=True)
class ImportSite:
    ref: DependencyRef
    location: SourceLocation


@dataclass(frozen=True)
class SymbolTable:
    """All symbols of the tree, in declaration order (units sorted by path)."""

    records: dict[str, SymbolRecord]
    export_requests: tuple[ExportRequest, ...] = ()
    import_sites: tuple[ImportSite, ...] = ()
    warnings: tuple[Diagnostic, ...] = ()

    def __contains__(self, name: object) -> bool:
        return name in self.records

    def __iter__(self) -> Iterator[SymbolRecord]:
        return iter(self.records.values())

    def __len__(self) -> int:
        return len(self.records)


def _joined(block: AnnotationBlock, kind: TagKind, sep: str = "\n\n") -> str:
    return sep.join(tag.value for tag in block.all(kind) if tag.value)


def _export_tags(
    block: AnnotationBlock, path: str
) -> tuple[bool, list[ExportRequest]]:
    """Split export tags into a self-export flag and out-of-band requests."""
    self_export = False
    requests: list[ExportRequest] = []
    for tag in block.all(TagKind.EXPORT):
        value = tag.value.strip()
        if value in _SELF_EXPORT_VALUES:
            self_export = True
        elif value == "false":
            continue
        else:
            location = SourceLocation(path, tag.line)
            requests.extend(
                ExportRequest(name=name.strip("`\"'"), location=location)
                for name in value.split()
            )
    return self_export, requests


def _import_sites(block: AnnotationBlock, path: str) -> list[ImportSite]:
    sites: list[ImportSite] = []
    for tag in block.all(TagKind.IMPORT_FROM):
        if not isinstance(tag.payload, ImportSpec):
            continue
        location = SourceLocation(path, tag.line)
        sites.extend(
            ImportSite(
                ref=DependencyRef(package=tag.payload.package, symbol=symbol),
                location=location,
            )
            for symbol in tag.payload.symbols
        )
    return sites


def _shape(spec: FormatSpec) -> ShapeDoc:
    return ShapeDoc(
        container=spec.container,
        rows=spec.rows,
        columns=spec.columns,
        length=spec.length,
        items=[
            ColumnDoc(name=item.name, description=item.description)
            for item in spec.items
        ],
        note=spec.note,
    )


def _check_params(
    declaration: Declaration, params: list[ParamDoc], warnings: list[Diagnostic]
) -> None:
    # "@param x,y" documents several arguments at once.
    documented = {
        name.strip() for param in params for name in param.name.split(",")
    }
    for name in sorted(documented - set(declaration.arguments)):
        warnings.append(
            warning(declaration.name, f"@param {name} does not match any argument")
        )
    for argument in declaration.arguments:
        if argument not in documented:
            warnings.append(
                warning(declaration.name, f"argument '{argument}' is not documented")
            )


def _record_from(
    declaration: Declaration,
    path: str,
    ordinal: int,
    warnings: list[Diagnostic],
) -> tuple[SymbolRecord, list[ExportRequest], list[ImportSite]]:
    base = {
        "name": declaration.name,
        "kind": declaration.kind,
        "path": path,
        "line": declaration.line,
        "start_byte": declaration.start_byte,
        "end_byte": declaration.end_byte,
        "ordinal": ordinal,
        "usage": declaration.usage,
        "arguments": list(declaration.arguments),
    }
    block = declaration.block
    if block is None:
        if declaration.kind == "dataset":
            warnings.append(
                warning(declaration.name, "dataset has no @format shape description")
            )
        return SymbolRecord(**base), [], []

    exported, requests = _export_tags(block, path)
    sites = _import_sites(block, path)

    params = [
        ParamDoc(name=tag.payload.name, description=tag.payload.description)
        for tag in block.all(TagKind.PARAM)
        if isinstance(tag.payload, ParamSpec)
    ]
    returns = _joined(block, TagKind.RETURN) or None
    format_tag = block.first(TagKind.FORMAT)
    shape = (
        _shape(format_tag.payload)
        if format_tag is not None and isinstance(format_tag.payload, FormatSpec)
        else None
    )

    if declaration.kind == "function":
        _check_params(declaration, params, warnings)
    else:
        if params:
            warnings.append(
                warning(declaration.name, f"@param ignored on a {declaration.kind}")
            )
            params = []
        if returns is not None:
            warnings.append(
                warning(declaration.name, f"@return ignored on a {declaration.kind}")
            )
            returns = None

    if declaration.kind == "dataset" and shape is None:
        warnings.append(
            warning(declaration.name, "dataset has no @format shape description")
        )
    elif declaration.kind != "dataset" and shape is not None:
        warnings.append(
            warning(declaration.name, f"@format ignored on a {declaration.kind}")
        )
        shape = None

    record = SymbolRecord(
        **base,
        exported=exported,
        documented=not block.is_empty,
        title=_joined(block, TagKind.TITLE, " "),
        description=_joined(block, TagKind.DESCRIPTION),
        details=_joined(block, TagKind.DETAILS),
        params=params,
        returns=returns,
        shape=shape,
        source=_joined(block, TagKind.SOURCE) or None,
        examples=_joined(block, TagKind.EXAMPLES, "\n"),
        seealso=[tag.value for tag in block.all(TagKind.SEEALSO) if tag.value],
        keywords=[
            word for tag in block.all(TagKind.KEYWORDS) for word in tag.value.split()
        ],
        imports=[site.ref for site in sites],
    )
    return record, requests, sites


class SymbolsGenerator:
    """Merges the declarations of every source unit into one symbol table."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "symbols"

    def generate(self, units: Sequence[SourceUnit]) -> SymbolTable:
        """Build the symbol table.

        Units are merged in path order so duplicate detection reports the
        same pair of locations on every run.

        Raises:
            DuplicateSymbol: If two declarations anywhere share a name.
        """
        records: dict[str, SymbolRecord] = {}
        locations: dict[str, SourceLocation] = {}
        requests: list[ExportRequest] = []
        sites: list[ImportSite] = []
        warnings: list[Diagnostic] = []

        ordinal = 0
        for unit in sorted(units, key=lambda u: u.path):
            for declaration in unit.declarations:
                location = unit.location(declaration)
                if declaration.name in locations:
                    raise DuplicateSymbol(
                        declaration.name, locations[declaration.name], location
                    )
                record, unit_requests, unit_sites = _record_from(
                    declaration, unit.path, ordinal, warnings
                )
                records[record.name] = record
                locations[record.name] = location
                requests.extend(unit_requests)
                sites.extend(unit_sites)
                ordinal += 1

            for block in unit.detached:
                self_export, block_requests = _export_tags(block, unit.path)
                if self_export:
                    warnings.append(
                        warning(
                            f"{unit.path}:{block.line}",
                            "@export without a name on a detached block is ignored",
                        )
                    )
                requests.extend(block_requests)
                sites.extend(_import_sites(block, unit.path))

        for request in requests:
            record = records.get(request.name)
            if record is not None and not record.exported:
                records[request.name] = record.model_copy(update={"exported": True})

        logger.debug(
            "symbol_table_built",
            symbols=len(records),
            export_requests=len(requests),
            import_sites=len(sites),
        )
        return SymbolTable(
            records=records,
            export_requests=tuple(requests),
            import_sites=tuple(sites),
            warnings=tuple(warnings),
        )


__all__ = ["ExportRequest", "ImportSite", "SymbolTable", "SymbolsGenerator"]
