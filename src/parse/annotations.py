"""Annotation block tokenizer.

An annotation block is a run of comment lines carrying the annotation prefix
(``#'`` by default). Leading untagged paragraphs become the implicit
``title`` and ``description`` tags, or only ``description`` when the block
has an explicit ``@title``. Every other tag starts with the tag marker
(``@``) followed by its key. Lines without a marker continue the current tag.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING

from contract.errors import MalformedAnnotation, SourceLocation
from report.diagnostics import Diagnostic, warning

if TYPE_CHECKING:
    from collections.abc import Sequence


class TagKind(str, Enum):
    """Closed set of recognized tag kinds plus a catch-all."""

    EXPORT = "export"
    PARAM = "param"
    RETURN = "return"
    IMPORT_FROM = "importFrom"
    FORMAT = "format"
    SOURCE = "source"
    TITLE = "title"
    DESCRIPTION = "description"
    DETAILS = "details"
    EXAMPLES = "examples"
    SEEALSO = "seealso"
    KEYWORDS = "keywords"
    UNRECOGNIZED = "unrecognized"


_KIND_BY_KEY: dict[str, TagKind] = {
    kind.value: kind for kind in TagKind if kind is not TagKind.UNRECOGNIZED
}
_KIND_BY_KEY["returns"] = TagKind.RETURN

PACKAGE_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9.]*$")

_COUNT = r"\d[\d,]*"
_TABLE_SHAPE = re.compile(
    rf"^(?P<container>[A-Za-z][\w .-]*?)\s+with\s+(?P<rows>{_COUNT})\s+rows?"
    rf"\s+and\s+(?P<columns>{_COUNT})\s+(?:columns?|variables?)\s*[:.]?$",
    re.IGNORECASE,
)
_VECTOR_SHAPE = re.compile(
    rf"^(?P<container>[A-Za-z][\w .-]*?)\s+of\s+length\s+(?P<length>{_COUNT})"
    r"\s*[:.]?$",
    re.IGNORECASE,
)
_COLUMN_ITEM = re.compile(r"^-\s+`?(?P<name>[^`:]+?)`?\s*:\s*(?P<description>.*)$")


@dataclass(frozen=True)
class ParamSpec:
    name: str
    description: str


@dataclass(frozen=True)
class ImportSpec:
    package: str
    symbols: tuple[str, ...]


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    description: str


@dataclass(frozen=True)
class FormatSpec:
    """Row/column shape of a dataset, parsed from a ``format`` tag."""

    container: str
    rows: int | None = None
    columns: int | None = None
    length: int | None = None
    items: tuple[ColumnSpec, ...] = ()
    note: str = ""

    def describe(self) -> str:
        if self.length is not None:
            return f"{self.container} of length {self.length}"
        return f"{self.container} with {self.rows} rows and {self.columns} columns"


TagPayload = ParamSpec | ImportSpec | FormatSpec | None


@dataclass(frozen=True)
class Tag:
    key: str
    kind: TagKind
    value: str
    line: int
    payload: TagPayload = None


@dataclass(frozen=True)
class AnnotationBlock:
    tags: tuple[Tag, ...]
    line: int

    def first(self, kind: TagKind) -> Tag | None:
        for tag in self.tags:
            if tag.kind is kind:
                return tag
        return None

    def all(self, kind: TagKind) -> tuple[Tag, ...]:
        return tuple(tag for tag in self.tags if tag.kind is kind)

    @property
    def is_empty(self) -> bool:
        return not self.tags


@dataclass
class BlockParse:
    block: AnnotationBlock
    warnings: list[Diagnostic] = field(default_factory=list)
    errors: list[MalformedAnnotation] = field(default_factory=list)


@dataclass
class _PendingTag:
    key: str
    first: str
    line: int
    continuation: list[str] = field(default_factory=list)


def _parse_count(raw: str) -> int:
    return int(raw.replace(",", ""))


def parse_format(value: str) -> FormatSpec:
    """Parse a dataset shape description.

    Raises:
        ValueError: If the first line is not a recognizable shape.
    """
    lines = value.split("\n")
    shape = lines[0].strip()

    table = _TABLE_SHAPE.match(shape)
    vector = _VECTOR_SHAPE.match(shape)
    if table is not None:
        parsed = FormatSpec(
            container=table.group("container").strip(),
            rows=_parse_count(table.group("rows")),
            columns=_parse_count(table.group("columns")),
        )
    elif vector is not None:
        parsed = FormatSpec(
            container=vector.group("container").strip(),
            length=_parse_count(vector.group("length")),
        )
    else:
        msg = (
            f"cannot parse shape {shape!r} (expected '<container> with <N> rows "
            "and <M> columns' or '<container> of length <N>')"
        )
        raise ValueError(msg)

    items: list[ColumnSpec] = []
    notes: list[str] = []
    for raw in lines[1:]:
        text = raw.strip()
        if not text:
            continue
        item = _COLUMN_ITEM.match(text)
        if item:
            items.append(
                ColumnSpec(
                    name=item.group("name").strip(),
                    description=item.group("description").strip(),
                )
            )
        elif items:
            last = items[-1]
            items[-1] = ColumnSpec(
                name=last.name, description=f"{last.description} {text}".strip()
            )
        else:
            notes.append(text)

    return replace(parsed, items=tuple(items), note=" ".join(notes))


def parse_param(value: str) -> ParamSpec:
    parts = value.split(None, 1)
    if not parts:
        msg = "expected '<name> <description>'"
        raise ValueError(msg)
    description = parts[1] if len(parts) > 1 else ""
    return ParamSpec(name=parts[0], description=" ".join(description.split()))


def parse_import_from(value: str) -> ImportSpec:
    tokens = [token.strip("`\"'") for token in value.split()]
    if len(tokens) < 2:
        msg = "expected '<package> <symbol> [<symbol> ...]'"
        raise ValueError(msg)
    package, *symbols = tokens
    if not PACKAGE_NAME.match(package):
        msg = f"invalid package name {package!r}"
        raise ValueError(msg)
    return ImportSpec(package=package, symbols=tuple(symbols))


def _join_value(kind: TagKind, pending: _PendingTag) -> str:
    if kind is TagKind.EXAMPLES:
        lines = [pending.first, *pending.continuation]
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()
        return "\n".join(line.rstrip() for line in lines)
    lines = [pending.first.strip(), *(line.strip() for line in pending.continuation)]
    return "\n".join(lines).strip()


def _finish_tag(
    pending: _PendingTag, result: BlockParse, tags: list[Tag], path: str
) -> None:
    kind = _KIND_BY_KEY.get(pending.key, TagKind.UNRECOGNIZED)
    value = _join_value(kind, pending)
    location = SourceLocation(path, pending.line)

    payload: TagPayload = None
    try:
        if kind is TagKind.PARAM:
            payload = parse_param(value)
        elif kind is TagKind.IMPORT_FROM:
            payload = parse_import_from(value)
        elif kind is TagKind.FORMAT:
            payload = parse_format(value)
    except ValueError as exc:
        result.errors.append(MalformedAnnotation(location, pending.key, str(exc)))
        return

    if kind is TagKind.TITLE and any(tag.kind is kind for tag in tags):
        result.warnings.append(warning(str(location), "duplicate @title ignored"))
        return

    if kind is TagKind.UNRECOGNIZED:
        result.warnings.append(
            warning(str(location), f"unrecognized tag @{pending.key}")
        )
    elif isinstance(payload, FormatSpec) and payload.items and payload.columns:
        if len(payload.items) != payload.columns:
            result.warnings.append(
                warning(
                    str(location),
                    f"@format declares {payload.columns} columns but describes "
                    f"{len(payload.items)}",
                )
            )

    tags.append(
        Tag(key=pending.key, kind=kind, value=value, line=pending.line, payload=payload)
    )


def _intro_tags(lines: Sequence[tuple[int, str]], *, has_title: bool) -> list[Tag]:
    """Split untagged leading lines into title and description paragraphs.

    With an explicit @title every leading paragraph is description.
    """
    paragraphs: list[list[tuple[int, str]]] = []
    current: list[tuple[int, str]] = []
    for line_number, text in lines:
        if text.strip():
            current.append((line_number, text.strip()))
        elif current:
            paragraphs.append(current)
            current = []
    if current:
        paragraphs.append(current)

    if not paragraphs:
        return []

    tags: list[Tag] = []
    if not has_title:
        title, *paragraphs = paragraphs
        tags.append(
            Tag(
                key="title",
                kind=TagKind.TITLE,
                value=" ".join(text for _, text in title),
                line=title[0][0],
            )
        )
    if paragraphs:
        tags.append(
            Tag(
                key="description",
                kind=TagKind.DESCRIPTION,
                value="\n\n".join(
                    " ".join(text for _, text in para) for para in paragraphs
                ),
                line=paragraphs[0][0][0],
            )
        )
    return tags


def parse_annotation_block(
    lines: Sequence[tuple[int, str]],
    *,
    path: str,
    marker: str = "@",
) -> BlockParse:
    """Tokenize one annotation block.

    Args:
        lines: ``(line_number, content)`` pairs with the prefix removed.
        path: Source-unit path used in diagnostics.
        marker: Tag marker.

    Returns:
        The block with its warnings and malformed-tag errors. Malformed tags
        are dropped from the block; the remaining tags are kept.
    """
    first_line = lines[0][0] if lines else 0
    intro: list[tuple[int, str]] = []
    tags: list[Tag] = []
    result = BlockParse(block=AnnotationBlock(tags=(), line=first_line))
    pending: _PendingTag | None = None

    for line_number, content in lines:
        stripped = content.strip()
        body = stripped[len(marker) :] if stripped.startswith(marker) else ""
        if body[:1].isalpha():
            if pending is not None:
                _finish_tag(pending, result, tags, path)
            key, *rest = body.split(None, 1)
            pending = _PendingTag(
                key=key, first=rest[0] if rest else "", line=line_number
            )
        elif pending is not None:
            pending.continuation.append(content)
        else:
            intro.append((line_number, content))

    if pending is not None:
        _finish_tag(pending, result, tags, path)

    has_title = any(tag.kind is TagKind.TITLE for tag in tags)
    intro_tags = _intro_tags(intro, has_title=has_title)
    result.block = AnnotationBlock(tags=(*intro_tags, *tags), line=first_line)
    return result


__all__ = [
    "PACKAGE_NAME",
    "AnnotationBlock",
    "BlockParse",
    "ColumnSpec",
    "FormatSpec",
    "ImportSpec",
    "ParamSpec",
    "Tag",
    "TagKind",
    "TagPayload",
    "parse_annotation_block",
    "parse_format",
    "parse_import_from",
    "parse_param",
]
