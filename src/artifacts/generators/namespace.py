"""Namespace synthesizer: the package's export and import surface."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from artifacts.models.artifacts.dependencies import DependencyRef
from artifacts.models.artifacts.namespace import NamespaceDescriptor
from contract.artifacts import GENERATED_MARKER
from contract.errors import DanglingExport

if TYPE_CHECKING:
    from artifacts.generators.deps import DependencySet
    from artifacts.generators.symbols import SymbolTable

logger = structlog.get_logger(__name__)

_SYNTACTIC_NAME = re.compile(r"^(?:[A-Za-z]|\.(?![0-9]))[A-Za-z0-9._]*$")


def _directive_name(name: str) -> str:
    if _SYNTACTIC_NAME.match(name):
        return name
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class NamespaceGenerator:
    """Computes the NamespaceDescriptor from the symbol table and dependencies."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "namespace"

    def generate(self, table: SymbolTable, deps: DependencySet) -> NamespaceDescriptor:
        """Derive exports and selective imports.

        Exports are sorted case-sensitively by name, ties broken by
        declaration order.

        Raises:
            DanglingExport: If an export tag names a symbol absent from the table.
        """
        for request in table.export_requests:
            if request.name not in table:
                raise DanglingExport(request.name, request.location)

        exported = sorted(
            (record for record in table if record.exported),
            key=lambda record: (record.name, record.ordinal),
        )
        exports: list[str] = []
        for record in exported:
            if not exports or exports[-1] != record.name:
                exports.append(record.name)

        imports = [
            DependencyRef(package=ref.package, symbol=ref.symbol)
            for ref in deps.selective
        ]
        logger.debug(
            "namespace_synthesized", exports=len(exports), imports=len(imports)
        )
        return NamespaceDescriptor(exports=exports, imports=imports)


def render_namespace(namespace: NamespaceDescriptor) -> str:
    """Render the namespace file: one directive per line, sorted."""
    lines = [f"# {GENERATED_MARKER}", ""]
    lines.extend(f"export({_directive_name(name)})" for name in namespace.exports)
    for ref in namespace.imports:
        package = _directive_name(ref.package)
        symbol = _directive_name(ref.symbol or "")
        lines.append(f"importFrom({package},{symbol})")
    return "\n".join(lines) + "\n"


__all__ = ["NamespaceGenerator", "render_namespace"]
