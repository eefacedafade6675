"""Utility functions for artifact generation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

from contract.artifacts import DOC_SUFFIX, GENERATED_MARKER

if TYPE_CHECKING:
    from pathlib import Path


def _to_dict(obj: object) -> object:
    """Convert object to dict for JSON serialization."""
    from dataclasses import asdict, is_dataclass

    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    return obj


def _dump_json(obj: object) -> bytes:
    payload = _to_dict(obj)
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    return orjson.dumps(payload, option=opts) + b"\n"


def _get_output_dir_name(out_dir: Path, root: Path) -> str:
    """Get the top-level directory name of out_dir inside root, if any."""
    try:
        if out_dir.is_relative_to(root):
            rel = out_dir.relative_to(root)
            if rel.parts:
                return rel.parts[0]
            return ""
    except ValueError:
        # Non-comparable paths mean out_dir is external; avoid filtering.
        return ""
    return ""


def is_generated_page(path: Path) -> bool:
    """Return True when ``path`` starts with the generated-file marker."""
    try:
        with path.open("rb") as handle:
            first_line = handle.readline()
    except OSError:
        return False
    return GENERATED_MARKER.encode("utf-8") in first_line


def list_generated_pages(out_dir: Path, docs_dir: str) -> set[str]:
    """Relative paths of generated pages currently in the docs directory.

    Hand-written files (no generated marker) are never listed.
    """
    directory = out_dir / docs_dir
    if not directory.is_dir():
        return set()
    return {
        f"{docs_dir}/{path.name}"
        for path in directory.iterdir()
        if path.suffix == DOC_SUFFIX
        and path.is_file()
        and not path.is_symlink()
        and is_generated_page(path)
    }
