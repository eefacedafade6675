"""Artifact contract definitions.

The manifest composer and namespace synthesizer are the only writers of their
files; the documentation generator owns every generated page in the docs
directory. Anything else editing them shows up as drift.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

# Artifact filename constants (stable contract identifiers).
MANIFEST_FILE = "DESCRIPTION"
NAMESPACE_FILE = "NAMESPACE"
DEFAULT_DOCS_DIR = "man"
DOC_SUFFIX = ".md"

# Marker carried by every generated namespace file and documentation page.
GENERATED_MARKER = "Generated by synth: do not edit by hand"

ArtifactKind = Literal["manifest", "namespace", "doc"]


@dataclass(frozen=True)
class ArtifactSpec:
    """Specification for one kind of synthesized artifact."""

    kind: ArtifactKind
    filename: str
    format: str
    owner: str


ARTIFACT_SPECS: dict[ArtifactKind, ArtifactSpec] = {
    "manifest": ArtifactSpec(
        kind="manifest",
        filename=MANIFEST_FILE,
        format="key-value",
        owner="manifest composer",
    ),
    "namespace": ArtifactSpec(
        kind="namespace",
        filename=NAMESPACE_FILE,
        format="directives",
        owner="namespace synthesizer",
    ),
    "doc": ArtifactSpec(
        kind="doc",
        filename=f"{DEFAULT_DOCS_DIR}/<name>{DOC_SUFFIX}",
        format="markdown",
        owner="documentation generator",
    ),
}


def artifact_kind(relative_path: str) -> ArtifactKind:
    """Classify an artifact by its path relative to the output directory."""
    if relative_path == MANIFEST_FILE:
        return "manifest"
    if relative_path == NAMESPACE_FILE:
        return "namespace"
    return "doc"


__all__ = [
    "ARTIFACT_SPECS",
    "DEFAULT_DOCS_DIR",
    "DOC_SUFFIX",
    "GENERATED_MARKER",
    "MANIFEST_FILE",
    "NAMESPACE_FILE",
    "ArtifactKind",
    "ArtifactSpec",
    "artifact_kind",
]
