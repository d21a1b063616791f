"""Structural document model produced by the block parser and consumed by the renderer.

A Block is a closed union of frozen dataclasses, one per kind. The renderer matches on
the concrete class, so adding a kind means touching every `match` that uses
`assert_never`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Literal

from .. import config


class BlockKind(str, Enum):
    HEADING1 = "heading1"
    HEADING2 = "heading2"
    HEADING3 = "heading3"
    HEADING4 = "heading4"
    PARAGRAPH = "paragraph"
    BULLET = "bullet"
    NUMBERED = "numbered"
    CHECKBOX = "checkbox"
    BLOCKQUOTE = "blockquote"
    HR = "hr"
    TABLE = "table"


HeadingLevel = Literal[1, 2, 3, 4]


@dataclass(frozen=True)
class Heading:
    level: HeadingLevel
    text: str

    @property
    def kind(self) -> BlockKind:
        return BlockKind(f"heading{self.level}")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text}


@dataclass(frozen=True)
class Paragraph:
    text: str
    kind: ClassVar[BlockKind] = BlockKind.PARAGRAPH

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text}


@dataclass(frozen=True)
class BulletItem:
    text: str
    indent_level: int = 0  # 0 = top-level, 1 = nested (deeper input collapses to 1)
    kind: ClassVar[BlockKind] = BlockKind.BULLET

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text, "indent_level": self.indent_level}


@dataclass(frozen=True)
class NumberedItem:
    text: str
    kind: ClassVar[BlockKind] = BlockKind.NUMBERED

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text}


@dataclass(frozen=True)
class CheckboxItem:
    text: str
    checked: bool = False
    kind: ClassVar[BlockKind] = BlockKind.CHECKBOX

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text, "checked": self.checked}


@dataclass(frozen=True)
class Blockquote:
    text: str
    kind: ClassVar[BlockKind] = BlockKind.BLOCKQUOTE

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "text": self.text}


@dataclass(frozen=True)
class HorizontalRule:
    kind: ClassVar[BlockKind] = BlockKind.HR

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value}


@dataclass(frozen=True)
class Table:
    """Pipe table. rows[0] is the header row; separator rows are never stored."""

    rows: tuple[tuple[str, ...], ...]
    kind: ClassVar[BlockKind] = BlockKind.TABLE

    @property
    def column_count(self) -> int:
        return max((len(r) for r in self.rows), default=0)

    def padded_rows(self) -> list[list[str]]:
        """Rows padded with empty cells up to column_count."""
        width = self.column_count
        return [list(r) + [""] * (width - len(r)) for r in self.rows]

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "rows": [list(r) for r in self.rows]}


Block = (
    Heading
    | Paragraph
    | BulletItem
    | NumberedItem
    | CheckboxItem
    | Blockquote
    | HorizontalRule
    | Table
)


@dataclass(frozen=True)
class TextRun:
    """A span of text sharing one inline style. `size` is in half-points (22 = 11pt)."""

    text: str
    bold: bool = False
    italic: bool = False
    is_code: bool = False
    size: int = 22


_HEX_COLOR_RE = re.compile(r"^[0-9A-F]{6}$")


def normalize_color(value: str) -> str:
    """Return a 6-digit upper-case hex colour; accepts an optional leading '#'."""
    color = value.strip().lstrip("#").upper()
    if not _HEX_COLOR_RE.match(color):
        raise ValueError(f"accent_color must be 6 hex digits, got {value!r}")
    return color


@dataclass
class DocumentOptions:
    """Per-document rendering options supplied by the caller."""

    title: str = ""
    organisation: str = field(default_factory=lambda: config.DEFAULT_ORGANISATION)
    accent_color: str = field(default_factory=lambda: config.DEFAULT_ACCENT_COLOR)

    def __post_init__(self) -> None:
        self.title = (self.title or "").strip()
        self.organisation = (self.organisation or "").strip() or config.DEFAULT_ORGANISATION
        self.accent_color = normalize_color(self.accent_color or config.DEFAULT_ACCENT_COLOR)

    @property
    def header_text(self) -> str:
        return self.title or self.organisation

    @property
    def footer_text(self) -> str:
        return f"{self.organisation} | Page "
