"""Namespace descriptor model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from artifacts.models.artifacts.dependencies import DependencyRef


class NamespaceDescriptor(BaseModel):
    """Exported names and selective imports, both sorted and deduplicated."""

    model_config = ConfigDict(frozen=True)

    exports: list[str] = Field(default_factory=list)
    imports: list[DependencyRef] = Field(default_factory=list)


__all__ = ["NamespaceDescriptor"]
