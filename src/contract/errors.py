"""Error taxonomy for synthesis runs.

Every error converts to a :class:`report.diagnostics.Diagnostic` so the CLI
can print the whole list in one pass. Parse errors are collected per source
unit; structural errors (duplicate symbol, dangling export, invalid manifest
field) abort the run before any artifact is written.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from contract.artifacts import MANIFEST_FILE
from report.diagnostics import Diagnostic, error

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True)
class SourceLocation:
    path: str
    line: int

    def __str__(self) -> str:
        return f"{self.path}:{self.line}"


class SynthError(Exception):
    """Base class for every synthesis failure."""

    subject = "synth"

    def to_diagnostic(self) -> Diagnostic:
        return error(self.subject, str(self))


class ParseError(SynthError):
    """A source unit (or one block of it) could not be parsed."""

    def __init__(self, location: SourceLocation, message: str) -> None:
        super().__init__(message)
        self.location = location
        self.subject = str(location)


class MalformedAnnotation(ParseError):
    """A recognized tag carries a structured value that does not parse."""

    def __init__(self, location: SourceLocation, key: str, message: str) -> None:
        super().__init__(location, f"malformed @{key}: {message}")
        self.key = key


class DuplicateSymbol(SynthError):
    def __init__(
        self, name: str, first: SourceLocation, second: SourceLocation
    ) -> None:
        super().__init__(f"duplicate symbol declared at {first} and {second}")
        self.name = name
        self.first = first
        self.second = second
        self.subject = name


class DanglingExport(SynthError):
    def __init__(self, name: str, location: SourceLocation) -> None:
        super().__init__(f"export requested at {location} but no such symbol exists")
        self.name = name
        self.location = location
        self.subject = name


class InvalidManifestField(SynthError):
    subject = MANIFEST_FILE

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"invalid manifest field '{field}': {message}")
        self.field = field


class UnknownPackageReference(SynthError):
    def __init__(self, package: str, location: SourceLocation) -> None:
        super().__init__(
            f"package '{package}' referenced at {location} is not a known dependency"
        )
        self.package = package
        self.location = location
        self.subject = package


class SynthesisFailed(SynthError):
    """Raised by the pipeline with every error and the warnings gathered so far."""

    def __init__(
        self,
        errors: Sequence[SynthError],
        warnings: Sequence[Diagnostic] = (),
    ) -> None:
        super().__init__("; ".join(str(err) for err in errors))
        self.errors = tuple(errors)
        self.warnings = tuple(warnings)

    def diagnostics(self) -> list[Diagnostic]:
        return [err.to_diagnostic() for err in self.errors] + list(self.warnings)


__all__ = [
    "DanglingExport",
    "DuplicateSymbol",
    "InvalidManifestField",
    "MalformedAnnotation",
    "ParseError",
    "SourceLocation",
    "SynthError",
    "SynthesisFailed",
    "UnknownPackageReference",
]
