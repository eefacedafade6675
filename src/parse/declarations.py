"""Top-level declaration scanning for source units.

Only lines at bracket depth zero (outside strings) are considered, so
declarations nested inside function bodies are ignored together with any
annotation written above them.
"""

from __future__ import annotations

import bisect
import codecs
import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Literal

import structlog

from contract.errors import ParseError, SourceLocation
from parse.annotations import AnnotationBlock, parse_annotation_block
from report.diagnostics import Diagnostic, warning

if TYPE_CHECKING:
    from pathlib import Path

logger = structlog.get_logger(__name__)

DeclarationKind = Literal["function", "dataset", "constant"]

_NAME = r"(?:`(?P<quoted>[^`]+)`|(?P<plain>[A-Za-z.][A-Za-z0-9._]*))"
_ASSIGNMENT = re.compile(rf"^{_NAME}\s*(?:<<-|<-|=(?!=))\s*(?P<value>.*)$")
_FUNCTION_VALUE = re.compile(r"^(?:function|\\)\s*\(")
_DATASET = re.compile(r"^(?P<quote>[\"'])(?P<name>[^\"']+)(?P=quote)\s*(?:#.*)?$")
_OPENERS = "([{"
_CLOSERS = ")]}"
_QUOTES = "\"'`"

# Lines that carry package-level annotation blocks instead of a symbol.
PACKAGE_SENTINEL = "_PACKAGE"
_DETACHED_SENTINELS = frozenset(
    {"NULL", f'"{PACKAGE_SENTINEL}"', f"'{PACKAGE_SENTINEL}'"}
)


@dataclass(frozen=True)
class Declaration:
    name: str
    kind: DeclarationKind
    line: int
    start_byte: int
    end_byte: int
    arguments: tuple[str, ...] = ()
    usage: str = ""
    block: AnnotationBlock | None = None


@dataclass(frozen=True)
class SourceUnit:
    path: str
    text: str
    declarations: tuple[Declaration, ...]
    detached: tuple[AnnotationBlock, ...] = ()

    def location(self, declaration: Declaration) -> SourceLocation:
        return SourceLocation(self.path, declaration.line)


@dataclass(frozen=True)
class UnitParse:
    unit: SourceUnit
    warnings: tuple[Diagnostic, ...] = ()
    errors: tuple[ParseError, ...] = ()


def _advance(line: str, depth: int, quote: str | None) -> tuple[int, str | None]:
    """Update bracket depth and open-string state across one line."""
    i = 0
    while i < len(line):
        ch = line[i]
        if quote is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == "#":
            break
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(depth - 1, 0)
        i += 1
    return depth, quote


def _read_balanced(text: str, start: int) -> tuple[str, int]:
    """Return the text inside the bracket at ``start`` and the closing index.

    An unterminated bracket extends to the end of the text.
    """
    depth = 0
    quote: str | None = None
    i = start
    while i < len(text):
        ch = text[i]
        if quote is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == "#":
            newline = text.find("\n", i)
            i = len(text) if newline == -1 else newline
            continue
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
            if depth == 0:
                return text[start + 1 : i], i
        i += 1
    return text[start + 1 :], len(text) - 1


def _split_arguments(inner: str) -> list[str]:
    """Split a signature on top-level commas, dropping comments."""
    parts: list[str] = []
    depth = 0
    quote: str | None = None
    in_comment = False
    current: list[str] = []
    for ch in inner:
        if in_comment:
            if ch != "\n":
                continue
            in_comment = False
        elif quote is not None:
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch == "#":
            in_comment = True
            continue
        elif ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    cleaned = [" ".join(part.split()) for part in parts]
    return [part for part in cleaned if part]


def _format_name(name: str) -> str:
    if re.fullmatch(r"[A-Za-z.][A-Za-z0-9._]*", name):
        return name
    return f"`{name}`"


class _Offsets:
    """Map character indices of a text to byte offsets."""

    def __init__(self, text: str, lines: list[str], byte_base: int = 0) -> None:
        self._text = text
        self.line_starts: list[int] = []
        self._byte_starts: list[int] = []
        char_pos = 0
        byte_pos = byte_base
        for line in lines:
            self.line_starts.append(char_pos)
            self._byte_starts.append(byte_pos)
            char_pos += len(line) + 1
            byte_pos += len(line.encode("utf-8")) + 1

    def byte(self, index: int) -> int:
        k = bisect.bisect_right(self.line_starts, index) - 1
        start = self.line_starts[k]
        return self._byte_starts[k] + len(self._text[start:index].encode("utf-8"))


def _match_declaration(
    line: str,
    line_index: int,
    text: str,
    offsets: _Offsets,
) -> Declaration | None:
    line_start = offsets.line_starts[line_index]
    line_number = line_index + 1
    end_of_line = line_start + len(line.rstrip("\r"))

    dataset = _DATASET.match(line)
    if dataset and dataset.group("name") == PACKAGE_SENTINEL:
        return None
    if dataset:
        return Declaration(
            name=dataset.group("name"),
            kind="dataset",
            line=line_number,
            start_byte=offsets.byte(line_start),
            end_byte=offsets.byte(end_of_line),
        )

    assignment = _ASSIGNMENT.match(line)
    if assignment is None:
        return None

    name = assignment.group("quoted") or assignment.group("plain")
    value = assignment.group("value")
    if not _FUNCTION_VALUE.match(value):
        return Declaration(
            name=name,
            kind="constant",
            line=line_number,
            start_byte=offsets.byte(line_start),
            end_byte=offsets.byte(end_of_line),
        )

    paren = line_start + assignment.start("value") + value.index("(")
    inner, close = _read_balanced(text, paren)
    parts = _split_arguments(inner)
    arguments = tuple(part.split("=", 1)[0].strip().strip("`") for part in parts)
    return Declaration(
        name=name,
        kind="function",
        line=line_number,
        start_byte=offsets.byte(line_start),
        end_byte=offsets.byte(close + 1),
        arguments=arguments,
        usage=f"{_format_name(name)}({', '.join(parts)})",
    )


def parse_source_unit(
    path: str,
    text: str,
    *,
    prefix: str = "#'",
    marker: str = "@",
    byte_base: int = 0,
) -> UnitParse:
    """Parse the text of one source unit into declarations and blocks.

    A block attaches to the declaration on the line right after it. A block
    followed by ``NULL`` or ``"_PACKAGE"`` is kept as a detached block; any
    other follower drops the block with a warning. Byte offsets count from
    ``byte_base``, the length of any byte-order mark stripped from ``text``.
    """
    lines = text.split("\n")
    offsets = _Offsets(text, lines, byte_base)
    declarations: list[Declaration] = []
    detached: list[AnnotationBlock] = []
    warnings: list[Diagnostic] = []
    errors: list[ParseError] = []

    block_lines: list[tuple[int, str]] = []
    depth = 0
    quote: str | None = None

    def _take_block() -> AnnotationBlock:
        parsed = parse_annotation_block(block_lines, path=path, marker=marker)
        warnings.extend(parsed.warnings)
        errors.extend(parsed.errors)
        return parsed.block

    for index, raw_line in enumerate(lines):
        line = raw_line.rstrip("\r")
        at_top = depth == 0 and quote is None

        if at_top and line.startswith(prefix):
            content = line[len(prefix) :]
            if content.startswith(" "):
                content = content[1:]
            block_lines.append((index + 1, content))
            continue

        declaration = (
            _match_declaration(line, index, text, offsets) if at_top else None
        )
        if block_lines:
            if declaration is not None:
                declaration = replace(declaration, block=_take_block())
            elif at_top and line.strip() in _DETACHED_SENTINELS:
                detached.append(_take_block())
            else:
                warnings.append(
                    warning(
                        f"{path}:{block_lines[0][0]}",
                        "annotation block is not attached to a declaration",
                    )
                )
            block_lines = []

        if declaration is not None:
            declarations.append(declaration)

        depth, quote = _advance(line, depth, quote)

    if block_lines:
        warnings.append(
            warning(
                f"{path}:{block_lines[0][0]}",
                "annotation block is not attached to a declaration",
            )
        )

    logger.debug(
        "parsed_source_unit",
        path=path,
        declarations=len(declarations),
        detached_blocks=len(detached),
        errors=len(errors),
    )
    unit = SourceUnit(
        path=path,
        text=text,
        declarations=tuple(declarations),
        detached=tuple(detached),
    )
    return UnitParse(unit=unit, warnings=tuple(warnings), errors=tuple(errors))


def read_source_unit(
    file_path: Path,
    relative_path: str,
    *,
    prefix: str = "#'",
    marker: str = "@",
) -> UnitParse:
    """Read and parse one source unit; unreadable files become parse errors."""
    try:
        data = file_path.read_bytes()
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        err = ParseError(
            SourceLocation(relative_path, 1), f"source unit is not valid UTF-8 ({exc})"
        )
        empty = SourceUnit(path=relative_path, text="", declarations=())
        return UnitParse(unit=empty, errors=(err,))
    except OSError as exc:
        err = ParseError(
            SourceLocation(relative_path, 1), f"failed to read source unit: {exc}"
        )
        empty = SourceUnit(path=relative_path, text="", declarations=())
        return UnitParse(unit=empty, errors=(err,))

    bom = len(codecs.BOM_UTF8) if data.startswith(codecs.BOM_UTF8) else 0
    return parse_source_unit(
        relative_path, text, prefix=prefix, marker=marker, byte_base=bom
    )


__all__ = [
    "Declaration",
    "DeclarationKind",
    "SourceUnit",
    "UnitParse",
    "parse_source_unit",
    "read_source_unit",
]
