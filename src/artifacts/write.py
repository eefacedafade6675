from __future__ import annotations

import errno
import os
import shutil
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from artifacts.context import build_context
from artifacts.pipeline import synthesize
from artifacts.utils import list_generated_pages
from scan.files import STAGING_PREFIX

if TYPE_CHECKING:
    from artifacts.pipeline import Synthesis
    from rules.config import SynthConfig

logger = structlog.get_logger(__name__)


def _read_existing(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
        return None


def _check_destination(out_dir: Path, destination: Path) -> None:
    """Raise before any commit if ``destination`` cannot take a regular file."""
    if destination.is_dir():
        raise IsADirectoryError(errno.EISDIR, "Is a directory", str(destination))
    parent = destination.parent
    while parent != out_dir and not parent.exists():
        parent = parent.parent
    if not parent.is_dir():
        raise NotADirectoryError(errno.ENOTDIR, "Not a directory", str(parent))


def _prepare_destinations(out_dir: Path, destinations: list[Path]) -> None:
    for destination in destinations:
        _check_destination(out_dir, destination)
    for destination in destinations:
        destination.parent.mkdir(parents=True, exist_ok=True)
        if not os.access(destination.parent, os.W_OK):
            raise PermissionError(
                errno.EACCES, "Permission denied", str(destination.parent)
            )


def _rollback(journal: list[tuple[Path, Path | None]]) -> None:
    for destination, backup in reversed(journal):
        if backup is None:
            destination.unlink(missing_ok=True)
        else:
            os.replace(backup, destination)


def stale_pages(synthesis: Synthesis) -> list[str]:
    """Generated pages on disk that no current symbol produces."""
    context = synthesis.context
    on_disk = list_generated_pages(context.out_dir, context.docs_dir)
    return sorted(on_disk - set(synthesis.artifacts))


def write_artifacts(synthesis: Synthesis) -> dict[str, list[str]]:
    """Write rendered artifacts through a staging directory.

    Files whose bytes already match are left untouched. Every destination is
    checked and its parent created before the first move. Changed files are
    then moved into place with ``os.replace``, and the files they displace
    (and stale pages) are parked in the staging directory so a failed move
    restores the tree as it was. The staging directory is always removed.

    Returns:
        Relative paths grouped as ``written``, ``unchanged`` and ``deleted``.

    Raises:
        OSError: If a destination cannot be written; no artifact is changed.
    """
    out_dir = synthesis.context.out_dir
    out_dir.mkdir(parents=True, exist_ok=True)

    changed: dict[str, bytes] = {}
    unchanged: list[str] = []
    for relative, data in sorted(synthesis.artifacts.items()):
        if _read_existing(out_dir / relative) == data:
            unchanged.append(relative)
        else:
            changed[relative] = data
    stale = stale_pages(synthesis)

    _prepare_destinations(out_dir, [out_dir / relative for relative in changed])

    staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=out_dir))
    try:
        backups = staging / "backup"
        backups.mkdir()
        staged: list[tuple[Path, Path]] = []
        for index, (relative, data) in enumerate(changed.items()):
            staged_path = staging / str(index)
            staged_path.write_bytes(data)
            staged.append((staged_path, out_dir / relative))

        journal: list[tuple[Path, Path | None]] = []
        try:
            for index, (staged_path, destination) in enumerate(staged):
                backup: Path | None = None
                if destination.exists():
                    backup = backups / str(index)
                    os.replace(destination, backup)
                journal.append((destination, backup))
                os.replace(staged_path, destination)
            for index, relative in enumerate(stale, start=len(staged)):
                backup = backups / str(index)
                os.replace(out_dir / relative, backup)
                journal.append((out_dir / relative, backup))
        except OSError:
            logger.error("artifacts_rolled_back", out_dir=str(out_dir))
            _rollback(journal)
            raise
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    logger.info(
        "artifacts_written",
        out_dir=str(out_dir),
        written=len(changed),
        unchanged=len(unchanged),
        deleted=len(stale),
    )
    return {"written": list(changed), "unchanged": unchanged, "deleted": stale}


def generate_all_artifacts(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: SynthConfig | None = None,
    strict: bool | None = None,
) -> dict[str, object]:
    """Synthesize and write the manifest, namespace and documentation pages.

    Args:
        root: Package root to analyze
        out_dir: Optional output directory for generated artifacts
        config: Optional configuration; loaded from synth.toml when omitted
        strict: Optional override of the configured strict flag

    Returns:
        Dictionary with counts, the written/unchanged/deleted paths and the
        warnings raised along the way.

    Raises:
        ConfigError: If the configuration is invalid.
        SynthesisFailed: If any stage fails; nothing is written.
        OSError: If an artifact cannot be written; earlier moves are undone.
    """
    context = build_context(root=root, out_dir=out_dir, config=config, strict=strict)
    synthesis = synthesize(context)
    outcome = write_artifacts(synthesis)

    return {
        "symbol_count": len(synthesis.table),
        "export_count": len(synthesis.namespace.exports),
        "import_count": len(synthesis.namespace.imports),
        "page_count": len(synthesis.pages),
        "artifacts": [str(context.out_dir / name) for name in synthesis.artifacts],
        "warnings": list(synthesis.warnings),
        **outcome,
    }


__all__ = ["generate_all_artifacts", "stale_pages", "write_artifacts"]
