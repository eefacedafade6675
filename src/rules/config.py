from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from contract.artifacts import DEFAULT_DOCS_DIR

CONFIG_FILENAME = "synth.toml"

_PACKAGE_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9.]*$")


class DocsConfig(BaseModel):
    """Configuration for documentation page generation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    dir: str = Field(
        default=DEFAULT_DOCS_DIR,
        description="Directory (relative to the output dir) for generated pages",
    )
    stubs_for_undocumented: bool = Field(
        default=True,
        description="Emit an internal stub page for symbols without annotations",
    )

    @field_validator("dir")
    @classmethod
    def validate_dir(cls, v: str) -> str:
        path = Path(v)
        if not v or path.is_absolute() or ".." in path.parts:
            msg = "docs.dir must be a non-empty relative path without '..'"
            raise ValueError(msg)
        return path.as_posix()


class ManifestDefaults(BaseModel):
    """Manifest fields used when no prior manifest exists."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: str = Field(default="0.0.0.9000", description="Initial version")
    title: str = Field(
        default="",
        description="Initial title (empty = use the package identifier)",
    )
    license: str = Field(default="file LICENSE", description="Initial license")


class SynthConfig(BaseModel):
    """Configuration for manifest, namespace and documentation synthesis."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    output_dir: str = Field(
        default=".",
        description="Output directory for generated artifacts",
    )
    source_extensions: list[str] = Field(
        default_factory=lambda: [".R", ".r"],
        description="File extensions identifying source units",
    )
    annotation_prefix: str = Field(
        default="#'",
        description="Line prefix of annotation comment blocks",
    )
    tag_marker: str = Field(default="@", description="Marker introducing a tag")
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all source units)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        description=(
            "Enable nested .gitignore composition (default: false for root-only)"
        ),
    )
    strict: bool = Field(
        default=False,
        description="Reject importFrom packages outside the known package list",
    )
    known_packages: list[str] = Field(
        default_factory=list,
        description="Packages accepted in strict mode besides declared imports",
    )
    workers: int = Field(
        default=4,
        ge=1,
        description="Thread pool size for parsing source units",
    )
    docs: DocsConfig = Field(default_factory=DocsConfig)
    manifest: ManifestDefaults = Field(default_factory=ManifestDefaults)

    @field_validator("source_extensions")
    @classmethod
    def validate_source_extensions(cls, v: list[str]) -> list[str]:
        if not v:
            msg = "source_extensions must list at least one extension"
            raise ValueError(msg)
        for ext in v:
            if not ext.startswith(".") or len(ext) < 2:
                msg = f"Invalid source extension '{ext}' (expected e.g. '.R')"
                raise ValueError(msg)
        return v

    @field_validator("annotation_prefix", "tag_marker")
    @classmethod
    def validate_marker(cls, v: str) -> str:
        if not v or v != v.strip():
            msg = "annotation_prefix and tag_marker must be non-empty without spaces"
            raise ValueError(msg)
        return v

    @field_validator("known_packages")
    @classmethod
    def validate_known_packages(cls, v: list[str]) -> list[str]:
        for package in v:
            if not _PACKAGE_NAME.match(package):
                msg = f"Invalid package name '{package}' in known_packages"
                raise ValueError(msg)
        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_output_dir(root: Path, output_dir: str) -> Path:
    """Resolve a config-provided output_dir safely within the package root.

    The config output_dir must be a non-empty relative path that remains
    within the root after resolution. Absolute paths and paths that escape
    the root are rejected.
    """
    if not output_dir:
        msg = "output_dir must be a non-empty relative path"
        raise ConfigError(msg)

    if output_dir.startswith("~"):
        msg = "output_dir must be a relative path within the package root"
        raise ConfigError(msg)

    output_path = Path(output_dir)
    if output_path.is_absolute():
        msg = "output_dir must be a relative path within the package root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output_dir '{output_dir}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output_dir '{output_dir}' escapes the package root"
        raise ConfigError(msg) from exc

    return resolved_output


def load_config(root: Path) -> SynthConfig:
    """Load configuration from synth.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return SynthConfig()

    try:
        with config_path.open("rb") as f:
            data: dict[str, Any] = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return SynthConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
