"""Dependency models for external package references."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class DependencyRef(BaseModel):
    """An external package, optionally narrowed to one imported symbol.

    Identity is the ``(package, symbol)`` pair; ``constraint`` only carries a
    version requirement declared in the manifest.
    """

    model_config = ConfigDict(frozen=True)

    package: str
    symbol: str | None = None
    constraint: str | None = None

    @property
    def selective(self) -> bool:
        return self.symbol is not None

    @property
    def key(self) -> tuple[str, str]:
        return (self.package, self.symbol or "")


def sort_refs(refs: list[DependencyRef]) -> list[DependencyRef]:
    """Sort by package then symbol; a package-level entry sorts first."""
    return sorted(refs, key=lambda ref: ref.key)


__all__ = ["DependencyRef", "sort_refs"]
