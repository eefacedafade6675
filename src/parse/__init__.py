"""Parsing utilities for synth."""

from parse.annotations import (
    AnnotationBlock,
    FormatSpec,
    ImportSpec,
    ParamSpec,
    Tag,
    TagKind,
    parse_annotation_block,
)
from parse.declarations import (
    Declaration,
    SourceUnit,
    UnitParse,
    parse_source_unit,
    read_source_unit,
)

__all__ = [
    "AnnotationBlock",
    "Declaration",
    "FormatSpec",
    "ImportSpec",
    "ParamSpec",
    "SourceUnit",
    "Tag",
    "TagKind",
    "UnitParse",
    "parse_annotation_block",
    "parse_source_unit",
    "read_source_unit",
]
