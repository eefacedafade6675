"""Documentation generator: one Markdown reference page per symbol."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from contract.artifacts import DEFAULT_DOCS_DIR, DOC_SUFFIX, GENERATED_MARKER
from utils import doc_filename

if TYPE_CHECKING:
    from collections.abc import Collection

    from artifacts.generators.symbols import SymbolTable
    from artifacts.models.artifacts.symbols import SymbolRecord

logger = structlog.get_logger(__name__)

_TOKEN = re.compile(
    r"(?P<url>https?://\S+)|"
    r"(?<![A-Za-z0-9._`\[/:@-])"
    r"(?P<tick>`?)(?P<name>[A-Za-z.][A-Za-z0-9._]*)(?P<call>\(\))?(?P=tick)"
)


@dataclass(frozen=True)
class DocPage:
    name: str
    relative_path: str
    text: str
    internal: bool


def link_references(text: str, known: Collection[str], current: str) -> str:
    """Turn mentions of other known symbols into relative links.

    A mention may carry ``()`` and backticks; trailing sentence dots are kept
    outside the link. Unknown names and self-references stay plain text.
    URLs and path-like tokens are never rewritten.

    Examples:
        >>> link_references("See helper().", {"helper", "f"}, "f")
        'See [helper()](helper.md).'
        >>> link_references("Uses f and nothing_known.", {"f"}, "f")
        'Uses f and nothing_known.'
        >>> link_references("See https://example.org/helper.", {"helper"}, "f")
        'See https://example.org/helper.'
    """

    def _replace(match: re.Match[str]) -> str:
        if match["url"]:
            return match.group(0)
        tick, name, call = match["tick"], match["name"], match["call"] or ""
        trailing = ""
        if not tick and not call:
            while name not in known and name.endswith("."):
                name = name[:-1]
                trailing += "."
        if not name or name not in known or name == current:
            return match.group(0)
        target = doc_filename(name, DOC_SUFFIX)
        return f"[{tick}{name}{call}{tick}]({target}){trailing}"

    return _TOKEN.sub(_replace, text)


def _item(name: str, description: str) -> str:
    return f"- `{name}`: {description}" if description else f"- `{name}`"


def _section(lines: list[str], heading: str, body: str) -> None:
    if body:
        lines.extend([f"## {heading}", "", body, ""])


def render_page(record: SymbolRecord, known: Collection[str]) -> str:
    """Render the reference page for one symbol."""

    def _link(text: str) -> str:
        return link_references(text, known, record.name)

    visibility = "exported" if record.exported else "internal"
    lines = [f"<!-- {GENERATED_MARKER} -->", "", f"# {record.name}", ""]
    if record.title:
        lines.extend([_link(record.title), ""])
    lines.extend([f"Visibility: {visibility}", ""])

    if record.kind == "function" and record.usage:
        lines.extend(["## Usage", "", "```r", record.usage, "```", ""])

    _section(lines, "Description", _link(record.description))

    if record.params:
        items = [
            _item(param.name, _link(param.description))
            for param in record.params
        ]
        _section(lines, "Arguments", "\n".join(items))

    if record.kind == "function" and record.returns:
        _section(lines, "Value", _link(record.returns))

    if record.kind == "dataset" and record.shape is not None:
        shape = [f"{record.shape.describe()}."]
        if record.shape.items:
            shape.append("")
            shape.extend(
                _item(item.name, _link(item.description))
                for item in record.shape.items
            )
        if record.shape.note:
            shape.extend(["", _link(record.shape.note)])
        _section(lines, "Format", "\n".join(shape))

    _section(lines, "Details", _link(record.details))

    if record.examples:
        _section(lines, "Examples", "\n".join(["```r", record.examples, "```"]))

    if record.seealso:
        _section(
            lines, "See also", "\n".join(f"- {_link(ref)}" for ref in record.seealso)
        )

    if record.source:
        _section(lines, "Source", _link(record.source))

    lines.append(f"Defined in `{record.path}`.")
    return "\n".join(lines) + "\n"


class DocsGenerator:
    """Renders documentation pages from the symbol table."""

    @property
    def name(self) -> str:
        """Generator name for logging and identification."""
        return "docs"

    def generate(
        self,
        table: SymbolTable,
        *,
        docs_dir: str = DEFAULT_DOCS_DIR,
        stubs_for_undocumented: bool = True,
    ) -> list[DocPage]:
        """Render one page per documented symbol, sorted by file name.

        Args:
            table: Symbol table for the whole tree
            docs_dir: Directory of the pages, relative to the output directory
            stubs_for_undocumented: Also emit internal pages for symbols
                without an annotation block
        """
        known = set(table.records)
        pages: list[DocPage] = []
        for record in table:
            if not record.documented and not stubs_for_undocumented:
                continue
            pages.append(
                DocPage(
                    name=record.name,
                    relative_path=f"{docs_dir}/{doc_filename(record.name)}",
                    text=render_page(record, known),
                    internal=not record.exported,
                )
            )
        pages.sort(key=lambda page: page.relative_path)
        logger.debug(
            "docs_rendered",
            pages=len(pages),
            internal=sum(page.internal for page in pages),
        )
        return pages


__all__ = ["DocPage", "DocsGenerator", "link_references", "render_page"]
