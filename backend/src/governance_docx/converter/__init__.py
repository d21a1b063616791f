"""Markdown → Word (.docx) conversion core."""

from .block_parser import parse_blocks
from .blocks import (
    Block,
    BlockKind,
    Blockquote,
    BulletItem,
    CheckboxItem,
    DocumentOptions,
    Heading,
    HorizontalRule,
    NumberedItem,
    Paragraph,
    Table,
    TextRun,
    normalize_color,
)
from .convert import markdown_to_docx
from .inline import SPAN_MATCHERS, parse_inline
from .renderer import build_document, render, serialize

__all__ = [
    "Block",
    "BlockKind",
    "Blockquote",
    "BulletItem",
    "CheckboxItem",
    "DocumentOptions",
    "Heading",
    "HorizontalRule",
    "NumberedItem",
    "Paragraph",
    "SPAN_MATCHERS",
    "Table",
    "TextRun",
    "build_document",
    "markdown_to_docx",
    "normalize_color",
    "parse_blocks",
    "parse_inline",
    "render",
    "serialize",
]
