"""Diagnostics and logging helpers for synth."""

from report.diagnostics import Diagnostic, Severity, format_diagnostics
from report.log import configure_logging

__all__ = ["Diagnostic", "Severity", "configure_logging", "format_diagnostics"]
