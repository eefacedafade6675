"""Artifact generators for synth."""

from artifacts.generators.deps import DepsGenerator
from artifacts.generators.docs import DocsGenerator
from artifacts.generators.manifest import ManifestGenerator
from artifacts.generators.namespace import NamespaceGenerator
from artifacts.generators.symbols import SymbolsGenerator

__all__ = [
    "DepsGenerator",
    "DocsGenerator",
    "ManifestGenerator",
    "NamespaceGenerator",
    "SymbolsGenerator",
]
