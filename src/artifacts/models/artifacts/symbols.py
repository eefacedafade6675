"""Symbol models for documentable entities.

One record per top-level declaration (function, dataset, constant), carrying
the documentation fields extracted from its annotation block.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from artifacts.models.artifacts.dependencies import DependencyRef

SymbolKind = Literal["function", "dataset", "constant"]


class ParamDoc(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""


class ColumnDoc(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""


class ShapeDoc(BaseModel):
    """Row/column shape of a dataset."""

    model_config = ConfigDict(frozen=True)

    container: str
    rows: int | None = None
    columns: int | None = None
    length: int | None = None
    items: list[ColumnDoc] = Field(default_factory=list)
    note: str = ""

    def describe(self) -> str:
        if self.length is not None:
            return f"{self.container} of length {self.length}"
        return f"{self.container} with {self.rows} rows and {self.columns} columns"


class SymbolRecord(BaseModel):
    """A documentable entity declared at the top level of a source unit."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: SymbolKind
    path: str
    line: int
    start_byte: int
    end_byte: int
    ordinal: int = Field(description="Declaration order across the whole tree")
    exported: bool = False
    documented: bool = Field(
        default=False, description="True when an annotation block is attached"
    )
    title: str = ""
    description: str = ""
    details: str = ""
    params: list[ParamDoc] = Field(default_factory=list)
    returns: str | None = None
    shape: ShapeDoc | None = None
    source: str | None = None
    examples: str = ""
    seealso: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    usage: str = ""
    arguments: list[str] = Field(default_factory=list)
    imports: list[DependencyRef] = Field(default_factory=list)

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}"


__all__ = ["ColumnDoc", "ParamDoc", "ShapeDoc", "SymbolKind", "SymbolRecord"]
