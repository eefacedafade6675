"""Drift detection for synthesized artifacts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal

import structlog

from artifacts.context import build_context
from artifacts.pipeline import synthesize
from artifacts.write import stale_pages
from contract.artifacts import artifact_kind

if TYPE_CHECKING:
    from pathlib import Path

    from report.diagnostics import Diagnostic
    from rules.config import SynthConfig

logger = structlog.get_logger(__name__)

DriftStatus = Literal["unchanged", "would-update", "would-create", "would-delete"]


@dataclass(frozen=True)
class ArtifactStatus:
    artifact: str
    status: DriftStatus

    def format(self) -> str:
        return f"{self.status}: {self.artifact}"


@dataclass(frozen=True)
class DriftReport:
    statuses: tuple[ArtifactStatus, ...] = field(default_factory=tuple)
    warnings: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return all(entry.status == "unchanged" for entry in self.statuses)

    def to_dict(self) -> dict[str, object]:
        return {
            "ok": self.ok,
            "artifacts": {entry.artifact: entry.status for entry in self.statuses},
            "diagnostics": [diag.to_dict() for diag in self.warnings],
        }


def check_artifacts(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: SynthConfig | None = None,
    strict: bool | None = None,
) -> DriftReport:
    """Compare freshly rendered artifacts against the files on disk.

    Recomputes the whole pipeline in memory and compares bytes. Nothing is
    ever written.

    Args:
        root: Package root to analyze.
        out_dir: Directory holding the existing artifacts.
        config: Optional configuration; loaded from synth.toml when omitted.
        strict: Optional override of the configured strict flag.

    Returns:
        DriftReport with one status per artifact, sorted by relative path.

    Raises:
        ConfigError: If the configuration is invalid.
        SynthesisFailed: If the pipeline itself fails.
    """
    context = build_context(root=root, out_dir=out_dir, config=config, strict=strict)
    synthesis = synthesize(context)

    statuses: list[ArtifactStatus] = []
    for relative, data in synthesis.artifacts.items():
        path = context.out_dir / relative
        status: DriftStatus
        if not path.is_file():
            status = "would-create"
        elif path.read_bytes() == data:
            status = "unchanged"
        else:
            status = "would-update"
        statuses.append(ArtifactStatus(artifact=relative, status=status))

    statuses.extend(
        ArtifactStatus(artifact=relative, status="would-delete")
        for relative in stale_pages(synthesis)
    )
    statuses.sort(key=lambda entry: entry.artifact)

    report = DriftReport(statuses=tuple(statuses), warnings=synthesis.warnings)
    drifted = [entry for entry in statuses if entry.status != "unchanged"]
    logger.info(
        "drift_checked",
        artifacts=len(statuses),
        drifted=len(drifted),
        kinds=sorted({artifact_kind(entry.artifact) for entry in drifted}),
    )
    return report


__all__ = ["ArtifactStatus", "DriftReport", "DriftStatus", "check_artifacts"]
