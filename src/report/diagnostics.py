"""User-facing diagnostic lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from collections.abc import Iterable

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    subject: str
    message: str

    def format(self) -> str:
        """Render as ``<severity>: <artifact-or-symbol>: <message>``."""
        return f"{self.severity}: {self.subject}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {
            "severity": self.severity,
            "subject": self.subject,
            "message": self.message,
        }


def error(subject: str, message: str) -> Diagnostic:
    return Diagnostic(severity="error", subject=subject, message=message)


def warning(subject: str, message: str) -> Diagnostic:
    return Diagnostic(severity="warning", subject=subject, message=message)


def format_diagnostics(diagnostics: Iterable[Diagnostic]) -> str:
    """Join diagnostics into newline-terminated text (empty when none)."""
    return "".join(f"{diag.format()}\n" for diag in diagnostics)


__all__ = ["Diagnostic", "Severity", "error", "format_diagnostics", "warning"]
