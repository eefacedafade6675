"""Manifest model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from artifacts.models.artifacts.dependencies import DependencyRef


class ManifestRecord(BaseModel):
    """Canonical package metadata plus the computed dependency list."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    version: str
    title: str
    license: str
    description: str | None = None
    fields: dict[str, str] = Field(
        default_factory=dict,
        description="Other user-supplied fields, preserved verbatim",
    )
    dependencies: list[DependencyRef] = Field(default_factory=list)

    @property
    def packages(self) -> list[str]:
        return sorted({ref.package for ref in self.dependencies})


__all__ = ["ManifestRecord"]
