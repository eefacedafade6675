"""Stable artifact contract and error taxonomy for synth.

Treat these exports as the boundary between the synthesizer and anything
consuming its artifacts or diagnostics.
"""

from contract.artifacts import (
    ARTIFACT_SPECS,
    DEFAULT_DOCS_DIR,
    DOC_SUFFIX,
    GENERATED_MARKER,
    MANIFEST_FILE,
    NAMESPACE_FILE,
    ArtifactKind,
    ArtifactSpec,
    artifact_kind,
)
from contract.errors import (
    DanglingExport,
    DuplicateSymbol,
    InvalidManifestField,
    MalformedAnnotation,
    ParseError,
    SourceLocation,
    SynthError,
    SynthesisFailed,
    UnknownPackageReference,
)

__all__ = [
    "ARTIFACT_SPECS",
    "DEFAULT_DOCS_DIR",
    "DOC_SUFFIX",
    "GENERATED_MARKER",
    "MANIFEST_FILE",
    "NAMESPACE_FILE",
    "ArtifactKind",
    "ArtifactSpec",
    "DanglingExport",
    "DuplicateSymbol",
    "InvalidManifestField",
    "MalformedAnnotation",
    "ParseError",
    "SourceLocation",
    "SynthError",
    "SynthesisFailed",
    "UnknownPackageReference",
    "artifact_kind",
]
