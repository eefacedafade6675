"""Model namespace for synthesized artifact schemas."""

from artifacts.models.artifacts.dependencies import DependencyRef, sort_refs
from artifacts.models.artifacts.manifest import ManifestRecord
from artifacts.models.artifacts.namespace import NamespaceDescriptor
from artifacts.models.artifacts.symbols import (
    ColumnDoc,
    ParamDoc,
    ShapeDoc,
    SymbolKind,
    SymbolRecord,
)

__all__ = [
    "ColumnDoc",
    "DependencyRef",
    "ManifestRecord",
    "NamespaceDescriptor",
    "ParamDoc",
    "ShapeDoc",
    "SymbolKind",
    "SymbolRecord",
    "sort_refs",
]
