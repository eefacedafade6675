"""Dependency resolver for synthesized artifacts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from artifacts.models.artifacts.dependencies import DependencyRef, sort_refs
from contract.errors import UnknownPackageReference
from report.diagnostics import Diagnostic, warning

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence

    from artifacts.generators.symbols import SymbolTable
    from contract.errors import SourceLocation

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DependencySet:
    """Deduplicated dependency references sorted by (package, symbol)."""

    refs: tuple[DependencyRef, ...]
    warnings: tuple[Diagnostic, ...] = ()

    @property
    def selective(self) -> list[DependencyRef]:
        return [ref for ref in self.refs if ref.selective]

    @property
    def packages(self) -> list[str]:
        return sorted({ref.package for ref in self.refs})


class DepsGenerator:
    """Unions annotation imports with the manifest's declared dependencies."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "deps"

    def generate(
        self,
        table: SymbolTable,
        *,
        declared: Sequence[DependencyRef] = (),
        strict: bool = False,
        whitelist: Collection[str] = (),
    ) -> DependencySet:
        """Resolve the dependency set.

        Args:
            table: Symbol table carrying every ``importFrom`` site
            declared: Package-level dependencies from the prior manifest
            strict: Reject packages outside ``whitelist``
            whitelist: Packages accepted in strict mode

        Raises:
            UnknownPackageReference: In strict mode, for the first referenced
                package (by package name, then location) not in the whitelist.
        """
        merged: dict[tuple[str, str], DependencyRef] = {}
        warnings: list[Diagnostic] = []

        for ref in declared:
            if ref.key in merged:
                warnings.append(
                    warning(ref.package, "listed more than once in the manifest")
                )
                continue
            merged[ref.key] = ref

        declared_packages = {ref.package for ref in declared}
        first_site: dict[tuple[str, str], SourceLocation] = {}
        undeclared: dict[str, SourceLocation] = {}
        unknown: list[UnknownPackageReference] = []

        for site in table.import_sites:
            ref = site.ref
            if ref.key in first_site:
                warnings.append(
                    warning(
                        f"{ref.package}::{ref.symbol}",
                        f"duplicate importFrom at {site.location} "
                        f"(first declared at {first_site[ref.key]})",
                    )
                )
                continue
            first_site[ref.key] = site.location
            merged.setdefault(ref.key, ref)

            if ref.package in declared_packages or ref.package in undeclared:
                continue
            undeclared[ref.package] = site.location
            if strict and ref.package not in whitelist:
                unknown.append(UnknownPackageReference(ref.package, site.location))

        if unknown:
            unknown.sort(key=lambda err: (err.package, str(err.location)))
            raise unknown[0]

        for package in sorted(undeclared):
            if package in whitelist:
                continue
            warnings.append(
                warning(
                    package,
                    f"referenced at {undeclared[package]} but not declared in the "
                    "manifest; added to the dependency list",
                )
            )

        refs = tuple(sort_refs(list(merged.values())))
        logger.debug(
            "dependencies_resolved",
            refs=len(refs),
            packages=len({ref.package for ref in refs}),
            strict=strict,
        )
        return DependencySet(refs=refs, warnings=tuple(warnings))


__all__ = ["DependencySet", "DepsGenerator"]
