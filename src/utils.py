"""Shared utilities for synth."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

_FILENAME_SAFE = "-._~"


def doc_filename(name: str, suffix: str = ".md") -> str:
    """Convert a symbol name to a documentation file name.

    Names outside ``[A-Za-z0-9-._~]`` are percent-encoded, which keeps the
    mapping injective.

    Examples:
        >>> doc_filename("add_numbers")
        'add_numbers.md'
        >>> doc_filename("%+%")
        '%25%2B%25.md'
    """
    return f"{quote(name, safe=_FILENAME_SAFE)}{suffix}"


def relative_posix(path: str | Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` with forward slashes.

    Examples:
        >>> relative_posix(Path("/pkg/R/add.R"), Path("/pkg"))
        'R/add.R'
    """
    return Path(path).relative_to(root).as_posix()
