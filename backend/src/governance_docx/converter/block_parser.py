"""Markdown → flat block list.

A small line-based parser for the constrained dialect the governance templates emit:
headings 1-4, pipe tables, checkboxes, numbered and bullet items, blockquotes,
horizontal rules and paragraphs. It never raises; anything unrecognised becomes a
Paragraph.
"""

from __future__ import annotations

import re

from loguru import logger

from .blocks import (
    Block,
    Blockquote,
    BulletItem,
    CheckboxItem,
    Heading,
    HeadingLevel,
    HorizontalRule,
    NumberedItem,
    Paragraph,
    Table,
)

_HR_RE = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})$")
_HEADING_PREFIXES: tuple[tuple[str, HeadingLevel], ...] = (("#### ", 4), ("### ", 3), ("## ", 2), ("# ", 1))
_TABLE_SEPARATOR_RE = re.compile(r"^\|[\s\-:|]+\|$")
_CHECKBOX_RE = re.compile(r"^(?:[-*]\s+)?\[([ xX])\](?:\s+(.*))?$")
_NUMBERED_RE = re.compile(r"^\d+\.\s+(.*)$")
_BULLET_RE = re.compile(r"^(\s*)[-*+]\s+(.*)$")
_PARAGRAPH_STOP_PREFIXES = ("#", "|", "-", "*", ">")

MAX_BULLET_LEVEL = 1


def parse_blocks(markdown: str) -> list[Block]:
    """Parse markdown into an ordered list of blocks."""
    lines = markdown.split("\n")
    out: list[Block] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()
        if not stripped:
            i += 1
            continue
        # HR
        if _HR_RE.match(stripped):
            out.append(HorizontalRule())
            i += 1
            continue
        # Heading
        heading = _match_heading(stripped)
        if heading is not None:
            out.append(heading)
            i += 1
            continue
        # Table
        if stripped.startswith("|"):
            rows: list[tuple[str, ...]] = []
            while i < len(lines) and lines[i].strip().startswith("|"):
                row = lines[i].strip()
                cells = () if _TABLE_SEPARATOR_RE.match(row) else _split_table_row(row)
                if cells:
                    rows.append(cells)
                i += 1
            if rows:
                out.append(Table(rows=tuple(rows)))
            continue
        # Checkbox
        m = _CHECKBOX_RE.match(stripped)
        if m:
            out.append(CheckboxItem(text=(m.group(2) or "").strip(), checked=m.group(1) in "xX"))
            i += 1
            continue
        # Numbered item
        m = _NUMBERED_RE.match(stripped)
        if m:
            out.append(NumberedItem(text=m.group(1).strip()))
            i += 1
            continue
        # Bullet item (possibly indented)
        m = _BULLET_RE.match(line)
        if m:
            level = min(len(m.group(1)) // 2, MAX_BULLET_LEVEL)
            out.append(BulletItem(text=m.group(2).strip(), indent_level=level))
            i += 1
            continue
        # Blockquote
        if stripped.startswith(">"):
            quote_lines = []
            while i < len(lines) and lines[i].strip().startswith(">"):
                quote_lines.append(_strip_quote_marker(lines[i].strip()))
                i += 1
            out.append(Blockquote(text=" ".join(quote_lines)))
            continue
        # Paragraph (collect until blank or another block)
        para_lines = [stripped]
        i += 1
        while i < len(lines) and lines[i].strip() and not _is_block_start(lines[i]):
            para_lines.append(lines[i].strip())
            i += 1
        out.append(Paragraph(text=" ".join(para_lines)))
    logger.debug("Parsed {} blocks from {} lines", len(out), len(lines))
    return out


def _match_heading(stripped: str) -> Heading | None:
    for prefix, level in _HEADING_PREFIXES:
        if stripped.startswith(prefix):
            return Heading(level=level, text=stripped[len(prefix) :].strip())
    return None


def _split_table_row(row: str) -> tuple[str, ...]:
    cells = row.split("|")
    # Leading pipe always yields an empty first field; a trailing pipe an empty last one.
    cells = cells[1:]
    if cells and not cells[-1].strip():
        cells = cells[:-1]
    return tuple(c.strip() for c in cells)


def _strip_quote_marker(stripped: str) -> str:
    text = stripped[1:]
    if text.startswith(" "):
        text = text[1:]
    return text


def _is_block_start(line: str) -> bool:
    """True when a line ends the paragraph above it.

    Any line starting with a block marker character stops the paragraph, even when it
    is not a well-formed block (`**Version:** 1.0` starts its own paragraph).
    """
    s = line.strip()
    if not s:
        return True
    if s.startswith(_PARAGRAPH_STOP_PREFIXES) or _HR_RE.match(s):
        return True
    if _CHECKBOX_RE.match(s) or _NUMBERED_RE.match(s):
        return True
    if _BULLET_RE.match(line):
        return True
    return False
