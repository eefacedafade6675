"""Manifest composer.

The manifest is ``Key: value`` text. Continuation lines start with
whitespace; a continuation line holding a single ``.`` stands for an empty
line. Rendering uses a fixed field order so unchanged input yields
byte-identical output.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from artifacts.models.artifacts.dependencies import DependencyRef
from artifacts.models.artifacts.manifest import ManifestRecord
from contract.errors import InvalidManifestField
from parse.annotations import PACKAGE_NAME

if TYPE_CHECKING:
    from pathlib import Path

    from artifacts.context import RunContext
    from artifacts.generators.deps import DependencySet

logger = structlog.get_logger(__name__)

FIELD_ORDER = (
    "Package",
    "Type",
    "Title",
    "Version",
    "Authors@R",
    "Author",
    "Maintainer",
    "Description",
    "License",
    "Encoding",
    "Depends",
    "Imports",
    "Suggests",
    "LinkingTo",
)
DEPENDENCY_FIELD = "Imports"

_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9.]*[A-Za-z0-9]$")
_VERSION = re.compile(r"^\d+\.\d+\.\d+(?:\.\d+)?$")
_FIELD_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9@/._-]*$")
_DEPENDENCY_ENTRY = re.compile(
    r"^(?P<package>[A-Za-z][A-Za-z0-9.]*)\s*(?:\((?P<constraint>[^()]*)\))?$"
)
_INDENT = "    "


def parse_manifest_text(text: str) -> dict[str, str]:
    """Parse manifest text into an ordered field mapping.

    Raises:
        InvalidManifestField: ``syntax`` when a line is neither a field nor a
            continuation, or a field repeats.
    """
    fields: dict[str, str] = {}
    current: str | None = None
    for line_number, raw in enumerate(text.splitlines(), 1):
        if not raw.strip():
            continue
        if raw[0] in " \t":
            if current is None:
                msg = f"line {line_number}: continuation line without a field"
                raise InvalidManifestField("syntax", msg)
            content = raw.strip()
            fields[current] += "\n" + ("" if content == "." else content)
            continue

        key, sep, value = raw.partition(":")
        key = key.strip()
        if not sep or not _FIELD_NAME.match(key):
            msg = f"line {line_number}: expected 'Key: value'"
            raise InvalidManifestField("syntax", msg)
        if key in fields:
            msg = f"line {line_number}: field '{key}' appears more than once"
            raise InvalidManifestField("syntax", msg)
        fields[key] = value.strip()
        current = key
    return fields


def read_manifest(path: Path) -> dict[str, str] | None:
    """Read the prior manifest, or None when the file does not exist."""
    if not path.is_file():
        return None
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidManifestField("syntax", f"cannot read manifest: {exc}") from exc
    return parse_manifest_text(text)


def parse_dependency_field(value: str) -> list[DependencyRef]:
    """Parse ``pkgA (>= 1.0), pkgB`` into package-level references.

    Raises:
        InvalidManifestField: ``dependencies`` for an unparseable entry.
    """
    refs: list[DependencyRef] = []
    for raw_entry in value.replace("\n", " ").split(","):
        entry = raw_entry.strip()
        if not entry:
            continue
        match = _DEPENDENCY_ENTRY.match(entry)
        if match is None:
            msg = f"cannot parse dependency entry {entry!r}"
            raise InvalidManifestField("dependencies", msg)
        constraint = " ".join((match.group("constraint") or "").split())
        refs.append(
            DependencyRef(package=match.group("package"), constraint=constraint or None)
        )
    return refs


def declared_dependencies(fields: dict[str, str] | None) -> list[DependencyRef]:
    """Package-level dependencies declared in a prior manifest."""
    if not fields or DEPENDENCY_FIELD not in fields:
        return []
    return parse_dependency_field(fields[DEPENDENCY_FIELD])


def _validate(record: ManifestRecord, root_name: str) -> None:
    """Validate in a fixed order; the first failing field is reported."""
    if not _IDENTIFIER.match(record.identifier):
        msg = f"{record.identifier!r} is not a valid package identifier"
        raise InvalidManifestField("identifier", msg)
    if record.identifier != root_name:
        msg = (
            f"{record.identifier!r} does not match the root directory name "
            f"{root_name!r}"
        )
        raise InvalidManifestField("identifier", msg)

    if not _VERSION.match(record.version):
        msg = (
            f"{record.version!r} is not three or four dot-separated "
            "non-negative integers"
        )
        raise InvalidManifestField("version", msg)

    if not record.license.strip():
        raise InvalidManifestField("license", "must not be empty")

    if not record.title.strip():
        raise InvalidManifestField("title", "must not be empty")

    for ref in record.dependencies:
        if not PACKAGE_NAME.match(ref.package):
            msg = f"invalid package name {ref.package!r}"
            raise InvalidManifestField("dependencies", msg)
        if ref.package == record.identifier:
            msg = f"package {ref.package!r} cannot depend on itself"
            raise InvalidManifestField("dependencies", msg)
        if ref.symbol is not None and not ref.symbol.strip():
            msg = f"empty symbol imported from {ref.package!r}"
            raise InvalidManifestField("dependencies", msg)


class ManifestGenerator:
    """Merges user metadata with computed dependencies into a ManifestRecord."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "manifest"

    def generate(
        self,
        context: RunContext,
        prior: dict[str, str] | None,
        deps: DependencySet,
    ) -> ManifestRecord:
        """Compose and validate the manifest.

        User fields come from the prior manifest when present; missing fields
        fall back to the configured defaults. ``Imports`` is always
        recomputed.

        Raises:
            InvalidManifestField: For the first field failing validation.
        """
        defaults = context.config.manifest
        fields = dict(prior or {})
        identifier = fields.pop("Package", context.root_name)
        record = ManifestRecord(
            identifier=identifier,
            version=fields.pop("Version", defaults.version),
            title=fields.pop("Title", defaults.title or identifier),
            license=fields.pop("License", defaults.license),
            description=fields.pop("Description", None),
            fields={k: v for k, v in fields.items() if k != DEPENDENCY_FIELD},
            dependencies=list(deps.refs),
        )
        _validate(record, context.root_name)
        logger.debug(
            "manifest_composed",
            identifier=record.identifier,
            version=record.version,
            packages=len(record.packages),
        )
        return record


def _dependency_value(record: ManifestRecord) -> str:
    constraints: dict[str, str] = {}
    for ref in record.dependencies:
        if ref.constraint and ref.package not in constraints:
            constraints[ref.package] = ref.constraint
    entries = [
        f"{package} ({constraints[package]})" if package in constraints else package
        for package in record.packages
    ]
    return "\n" + ",\n".join(entries)


def _render_field(key: str, value: str) -> list[str]:
    first, *rest = value.split("\n")
    lines = [f"{key}: {first}".rstrip()]
    lines.extend(f"{_INDENT}{line}" if line else f"{_INDENT}." for line in rest)
    return lines


def render_manifest(record: ManifestRecord) -> str:
    """Render canonical manifest text with a stable field order."""
    values: dict[str, str] = {
        "Package": record.identifier,
        "Title": record.title,
        "Version": record.version,
        "License": record.license,
        **record.fields,
    }
    if record.description is not None:
        values["Description"] = record.description
    if record.packages:
        values[DEPENDENCY_FIELD] = _dependency_value(record)

    ordered = [key for key in FIELD_ORDER if key in values]
    ordered.extend(sorted(key for key in values if key not in FIELD_ORDER))

    lines: list[str] = []
    for key in ordered:
        lines.extend(_render_field(key, values[key]))
    return "\n".join(lines) + "\n"


__all__ = [
    "DEPENDENCY_FIELD",
    "FIELD_ORDER",
    "ManifestGenerator",
    "declared_dependencies",
    "parse_dependency_field",
    "parse_manifest_text",
    "read_manifest",
    "render_manifest",
]
