"""Fixed layout constants for rendered documents.

Font sizes are in half-points (the unit Word stores), lengths in twips (1/20 pt).
"""

from __future__ import annotations

from dataclasses import dataclass

FONT = "Calibri"
CODE_FONT = "Consolas"
SYMBOL_FONT = "Segoe UI Symbol"

BODY_SIZE = 22
TABLE_SIZE = 20
CHROME_SIZE = 16
CODE_SIZE_DELTA = 2

# A4 with 1" margins
PAGE_WIDTH = 11906
PAGE_HEIGHT = 16838
PAGE_MARGIN = 1440
CONTENT_WIDTH = PAGE_WIDTH - 2 * PAGE_MARGIN

MUTED_COLOR = "999999"
QUOTE_COLOR = "555555"
RULE_COLOR = "CCCCCC"
ZEBRA_FILL = "F5F5F5"
CODE_FILL = "F0F0F0"
HEADER_TEXT_COLOR = "FFFFFF"

PARAGRAPH_SPACING = 80
LIST_SPACING = 40
QUOTE_SPACING = 120
RULE_SPACING = 200
TABLE_GAP_AFTER = 120

LIST_INDENT = 720
LIST_HANGING = 360
QUOTE_INDENT = 720
CHECKBOX_INDENT = 720

# Border widths are in eighths of a point.
RULE_BORDER_SIZE = 6
QUOTE_BORDER_SIZE = 18
QUOTE_BORDER_SPACE = 8
CELL_BORDER_SIZE = 4

CELL_MARGIN_VERTICAL = 60
CELL_MARGIN_HORIZONTAL = 100

BULLET_GLYPHS = ("•", "◦")
CHECKED_GLYPH = "☑ "
UNCHECKED_GLYPH = "☐ "


@dataclass(frozen=True)
class HeadingStyle:
    size: int
    space_before: int
    space_after: int
    color: str | None  # None = accent colour
    italic: bool = False


HEADING_STYLES: dict[int, HeadingStyle] = {
    1: HeadingStyle(size=36, space_before=360, space_after=200, color=None),
    2: HeadingStyle(size=28, space_before=300, space_after=160, color=None),
    3: HeadingStyle(size=24, space_before=240, space_after=120, color="333333"),
    4: HeadingStyle(size=22, space_before=200, space_after=100, color="555555", italic=True),
}
