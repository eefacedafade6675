"""Immutable per-run context threaded through every synthesis stage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from contract.artifacts import MANIFEST_FILE
from rules.config import load_config, resolve_output_dir

if TYPE_CHECKING:
    from pathlib import Path

    from rules.config import SynthConfig


@dataclass(frozen=True)
class RunContext:
    root: Path
    out_dir: Path
    config: SynthConfig
    strict: bool

    @property
    def root_name(self) -> str:
        return self.root.name

    @property
    def manifest_path(self) -> Path:
        return self.out_dir / MANIFEST_FILE

    @property
    def docs_dir(self) -> str:
        return self.config.docs.dir


def build_context(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: SynthConfig | None = None,
    strict: bool | None = None,
) -> RunContext:
    """Resolve configuration and output location for one run.

    Args:
        root: Package root (its directory name is the package identifier)
        out_dir: Optional override for the artifact directory
        config: Optional configuration; loaded from synth.toml when omitted
        strict: Optional override of the configured strict flag

    Raises:
        ConfigError: If synth.toml is invalid or output_dir escapes the root.
    """
    root = root.resolve()
    if config is None:
        config = load_config(root)

    if out_dir is None:
        out_dir = resolve_output_dir(root, config.output_dir)

    return RunContext(
        root=root,
        out_dir=out_dir,
        config=config,
        strict=config.strict if strict is None else strict,
    )


__all__ = ["RunContext", "build_context"]
