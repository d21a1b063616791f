"""Block list → .docx via python-docx.

One `_DocxBuilder` is created per conversion. Styles, numbering definitions and
numbering ids all live on that instance, so concurrent conversions share nothing.

Notes on the raw XML below:
- python-docx has no API for paragraph borders, cell borders/shading, abstract
  numbering definitions or fields, so those are written as OOXML elements.
- Child order inside pPr/tcPr/rPr is fixed by the schema; every insert goes through
  `insert_element_before` with the list of tags that must follow it.
"""

from __future__ import annotations

import asyncio
import io
from typing import assert_never

from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import parse_xml
from docx.oxml.ns import nsdecls, qn
from docx.shared import Pt, RGBColor, Twips
from docx.table import Table as DocxTable
from docx.text.paragraph import Paragraph as DocxParagraph
from loguru import logger

from . import theme
from .blocks import (
    Block,
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
)
from .inline import parse_inline

_PBDR_SUCCESSORS = (
    "w:shd", "w:tabs", "w:suppressAutoHyphens", "w:kinsoku", "w:wordWrap",
    "w:overflowPunct", "w:topLinePunct", "w:autoSpaceDE", "w:autoSpaceDN", "w:bidi",
    "w:adjustRightInd", "w:snapToGrid", "w:spacing", "w:ind", "w:contextualSpacing",
    "w:mirrorIndents", "w:suppressOverlap", "w:jc", "w:textDirection", "w:textAlignment",
    "w:textboxTightWrap", "w:outlineLvl", "w:divId", "w:cnfStyle", "w:rPr", "w:sectPr",
    "w:pPrChange",
)
_TC_MAR_SUCCESSORS = (
    "w:textDirection", "w:tcFitText", "w:vAlign", "w:hideMark", "w:headers",
    "w:cellIns", "w:cellDel", "w:cellMerge", "w:tcPrChange",
)
_TC_SHD_SUCCESSORS = ("w:noWrap", "w:tcMar", *_TC_MAR_SUCCESSORS)
_TC_BORDERS_SUCCESSORS = ("w:shd", *_TC_SHD_SUCCESSORS)
_RPR_SHD_SUCCESSORS = (
    "w:fitText", "w:vertAlign", "w:rtl", "w:cs", "w:em", "w:lang",
    "w:eastAsianLayout", "w:specVanish", "w:oMath",
)
_THEME_FONT_ATTRS = ("w:asciiTheme", "w:hAnsiTheme", "w:eastAsiaTheme", "w:cstheme")

LIST_PARAGRAPH_STYLE = "List Paragraph"


class _Numbering:
    """Numbering definitions for one document, declared on first use."""

    def __init__(self, document: DocxDocument) -> None:
        self._document = document
        self._bullet_num_id: int | None = None
        self._decimal_abstract_id: int | None = None

    @property
    def _element(self):
        return self._document.part.numbering_part.element

    def bullet_num_id(self) -> int:
        if self._bullet_num_id is None:
            levels = [
                (level, "bullet", glyph, theme.LIST_INDENT * (level + 1))
                for level, glyph in enumerate(theme.BULLET_GLYPHS)
            ]
            abstract_id = self._add_abstract_num("hybridMultilevel", levels)
            self._bullet_num_id = self._add_num(abstract_id)
        return self._bullet_num_id

    def new_decimal_list(self) -> int:
        """Start a new decimal list instance; each one restarts at 1."""
        if self._decimal_abstract_id is None:
            self._decimal_abstract_id = self._add_abstract_num(
                "singleLevel", [(0, "decimal", "%1.", theme.LIST_INDENT)]
            )
        return self._add_num(self._decimal_abstract_id, restart=True)

    def _add_abstract_num(self, multi_level_type: str, levels: list[tuple[int, str, str, int]]) -> int:
        numbering = self._element
        existing = [int(a.get(qn("w:abstractNumId"))) for a in numbering.findall(qn("w:abstractNum"))]
        abstract_id = max(existing, default=-1) + 1
        lvls = "".join(
            f'<w:lvl w:ilvl="{ilvl}"><w:start w:val="1"/><w:numFmt w:val="{fmt}"/>'
            f'<w:lvlText w:val="{text}"/><w:lvlJc w:val="left"/>'
            f'<w:pPr><w:ind w:left="{left}" w:hanging="{theme.LIST_HANGING}"/></w:pPr></w:lvl>'
            for ilvl, fmt, text, left in levels
        )
        abstract = parse_xml(
            f'<w:abstractNum {nsdecls("w")} w:abstractNumId="{abstract_id}">'
            f'<w:multiLevelType w:val="{multi_level_type}"/>{lvls}</w:abstractNum>'
        )
        # All abstractNum elements must precede the first num.
        first_num = numbering.find(qn("w:num"))
        if first_num is not None:
            first_num.addprevious(abstract)
        else:
            numbering.append(abstract)
        return abstract_id

    def _add_num(self, abstract_id: int, restart: bool = False) -> int:
        numbering = self._element
        existing = [int(n.get(qn("w:numId"))) for n in numbering.findall(qn("w:num"))]
        num_id = max(existing, default=0) + 1
        override = (
            '<w:lvlOverride w:ilvl="0"><w:startOverride w:val="1"/></w:lvlOverride>' if restart else ""
        )
        num = parse_xml(
            f'<w:num {nsdecls("w")} w:numId="{num_id}">'
            f'<w:abstractNumId w:val="{abstract_id}"/>{override}</w:num>'
        )
        cleanup = numbering.find(qn("w:numIdMacAtCleanup"))
        if cleanup is not None:
            cleanup.addprevious(num)
        else:
            numbering.append(num)
        return num_id


class _DocxBuilder:
    """Builds one python-docx Document from a block list."""

    def __init__(self, options: DocumentOptions) -> None:
        self.options = options
        self.document: DocxDocument = Document()
        self.numbering = _Numbering(self.document)
        self._numbered_list_id: int | None = None

    def build(self, blocks: list[Block]) -> DocxDocument:
        self._configure_page()
        self._configure_styles()
        self._add_header_footer()
        props = self.document.core_properties
        props.title = self.options.header_text
        props.author = self.options.organisation
        for block in blocks:
            self._add_block(block)
        return self.document

    # --- page & styles ---

    def _configure_page(self) -> None:
        section = self.document.sections[0]
        section.page_width = Twips(theme.PAGE_WIDTH)
        section.page_height = Twips(theme.PAGE_HEIGHT)
        section.top_margin = Twips(theme.PAGE_MARGIN)
        section.bottom_margin = Twips(theme.PAGE_MARGIN)
        section.left_margin = Twips(theme.PAGE_MARGIN)
        section.right_margin = Twips(theme.PAGE_MARGIN)

    def _configure_styles(self) -> None:
        styles = self.document.styles
        normal = styles["Normal"]
        normal.font.name = theme.FONT
        normal.font.size = _half_points(theme.BODY_SIZE)
        for level, spec in theme.HEADING_STYLES.items():
            style = styles[f"Heading {level}"]
            _drop_theme_fonts(style.element.rPr)
            style.font.name = theme.FONT
            style.font.size = _half_points(spec.size)
            style.font.bold = True
            style.font.italic = spec.italic
            style.font.color.rgb = RGBColor.from_string(spec.color or self.options.accent_color)
            style.paragraph_format.space_before = Twips(spec.space_before)
            style.paragraph_format.space_after = Twips(spec.space_after)

    def _add_header_footer(self) -> None:
        section = self.document.sections[0]

        header = section.header.paragraphs[0]
        header.alignment = WD_ALIGN_PARAGRAPH.RIGHT
        _add_run(
            header,
            self.options.header_text,
            size=theme.CHROME_SIZE,
            italic=True,
            color=theme.MUTED_COLOR,
        )

        footer = section.footer.paragraphs[0]
        footer.alignment = WD_ALIGN_PARAGRAPH.CENTER
        _add_run(footer, self.options.footer_text, size=theme.CHROME_SIZE, color=theme.MUTED_COLOR)
        _add_page_number_field(footer, size=theme.CHROME_SIZE, color=theme.MUTED_COLOR)

    # --- blocks ---

    def _add_block(self, block: Block) -> None:
        if not isinstance(block, (NumberedItem, BulletItem)):
            self._numbered_list_id = None
        match block:
            case Heading():
                self._add_heading(block)
            case Paragraph():
                p = self.document.add_paragraph()
                _set_spacing(p, theme.PARAGRAPH_SPACING, theme.PARAGRAPH_SPACING)
                self._add_inline(p, block.text)
            case BulletItem():
                p = self._add_list_paragraph(self.numbering.bullet_num_id(), block.indent_level)
                self._add_inline(p, block.text)
            case NumberedItem():
                if self._numbered_list_id is None:
                    self._numbered_list_id = self.numbering.new_decimal_list()
                p = self._add_list_paragraph(self._numbered_list_id, 0)
                self._add_inline(p, block.text)
            case CheckboxItem():
                p = self.document.add_paragraph()
                _set_spacing(p, theme.LIST_SPACING, theme.LIST_SPACING)
                p.paragraph_format.left_indent = Twips(theme.CHECKBOX_INDENT)
                glyph = theme.CHECKED_GLYPH if block.checked else theme.UNCHECKED_GLYPH
                _add_run(p, glyph, size=theme.BODY_SIZE, font=theme.SYMBOL_FONT)
                self._add_inline(p, block.text)
            case Blockquote():
                self._add_blockquote(block)
            case HorizontalRule():
                p = self.document.add_paragraph()
                _set_spacing(p, theme.RULE_SPACING, theme.RULE_SPACING)
                _set_paragraph_border(
                    p, "bottom", size=theme.RULE_BORDER_SIZE, color=theme.RULE_COLOR, space=1
                )
            case Table():
                self._add_table(block)
            case _:
                assert_never(block)

    def _add_heading(self, block: Heading) -> None:
        spec = theme.HEADING_STYLES[block.level]
        color = spec.color or self.options.accent_color
        p = self.document.add_paragraph(style=f"Heading {block.level}")
        for run in parse_inline(block.text, spec.size):
            _add_run(
                p,
                run.text,
                size=spec.size,
                bold=True,
                italic=spec.italic or run.italic,
                color=color,
            )

    def _add_list_paragraph(self, num_id: int, level: int) -> DocxParagraph:
        style = LIST_PARAGRAPH_STYLE if LIST_PARAGRAPH_STYLE in self.document.styles else None
        p = self.document.add_paragraph(style=style)
        _set_spacing(p, theme.LIST_SPACING, theme.LIST_SPACING)
        num_pr = p._p.get_or_add_pPr().get_or_add_numPr()
        num_pr.get_or_add_ilvl().val = level
        num_pr.get_or_add_numId().val = num_id
        return p

    def _add_blockquote(self, block: Blockquote) -> None:
        p = self.document.add_paragraph()
        _set_spacing(p, theme.QUOTE_SPACING, theme.QUOTE_SPACING)
        p.paragraph_format.left_indent = Twips(theme.QUOTE_INDENT)
        _set_paragraph_border(
            p,
            "left",
            size=theme.QUOTE_BORDER_SIZE,
            color=self.options.accent_color,
            space=theme.QUOTE_BORDER_SPACE,
        )
        for run in parse_inline(block.text):
            _add_run(p, run.text, size=theme.BODY_SIZE, italic=True, color=theme.QUOTE_COLOR)

    def _add_table(self, block: Table) -> None:
        col_count = block.column_count
        if col_count == 0:
            return
        rows = block.padded_rows()
        widths = column_widths(col_count)
        table = self.document.add_table(rows=len(rows), cols=col_count)
        table.autofit = False
        _set_table_width(table, theme.CONTENT_WIDTH)
        for ci, width in enumerate(widths):
            table.columns[ci].width = Twips(width)
        for ri, row in enumerate(rows):
            fill = self._row_fill(ri)
            for ci, cell_text in enumerate(row):
                cell = table.cell(ri, ci)
                cell.width = Twips(widths[ci])
                tc_pr = cell._tc.get_or_add_tcPr()
                _set_cell_borders(tc_pr)
                if fill:
                    _set_cell_shading(tc_pr, fill)
                _set_cell_margins(tc_pr)
                paragraph = cell.paragraphs[0]
                for run in parse_inline(cell_text, theme.TABLE_SIZE):
                    if ri == 0:
                        _add_run(
                            paragraph,
                            run.text,
                            size=theme.TABLE_SIZE,
                            bold=True,
                            color=theme.HEADER_TEXT_COLOR,
                        )
                    else:
                        _add_text_run(paragraph, run)
        spacer = self.document.add_paragraph()
        spacer.paragraph_format.space_after = Twips(theme.TABLE_GAP_AFTER)

    def _row_fill(self, row_index: int) -> str | None:
        # Keyed on absolute row index: 0 is the header, then even rows are striped.
        if row_index == 0:
            return self.options.accent_color
        if row_index % 2 == 0:
            return theme.ZEBRA_FILL
        return None

    def _add_inline(self, paragraph: DocxParagraph, text: str) -> None:
        for run in parse_inline(text, theme.BODY_SIZE):
            _add_text_run(paragraph, run)


def column_widths(col_count: int, total: int = theme.CONTENT_WIDTH) -> list[int]:
    """Equal widths in twips; the last column absorbs the rounding remainder."""
    width = total // col_count
    widths = [width] * col_count
    widths[-1] = total - width * (col_count - 1)
    return widths


def build_document(blocks: list[Block], options: DocumentOptions) -> DocxDocument:
    """Build (but do not serialize) the document for a block list."""
    document = _DocxBuilder(options).build(blocks)
    logger.debug("Built document with {} blocks (header={!r})", len(blocks), options.header_text)
    return document


def serialize(document: DocxDocument) -> bytes:
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


async def render(blocks: list[Block], options: DocumentOptions) -> bytes:
    """Render blocks to .docx bytes. Serialization errors propagate to the caller."""
    document = build_document(blocks, options)
    return await asyncio.to_thread(serialize, document)


# --- run helpers ---


def _half_points(size: int) -> Pt:
    return Pt(size / 2)


def _add_run(
    paragraph: DocxParagraph,
    text: str,
    *,
    size: int,
    bold: bool = False,
    italic: bool = False,
    color: str | None = None,
    font: str = theme.FONT,
):
    run = paragraph.add_run(text)
    run.font.name = font
    run.font.size = _half_points(size)
    if bold:
        run.bold = True
    if italic:
        run.italic = True
    if color:
        run.font.color.rgb = RGBColor.from_string(color)
    return run


def _add_text_run(paragraph: DocxParagraph, run: TextRun):
    if run.is_code:
        r = _add_run(paragraph, run.text, size=run.size - theme.CODE_SIZE_DELTA, font=theme.CODE_FONT)
        shd = parse_xml(f'<w:shd {nsdecls("w")} w:val="clear" w:color="auto" w:fill="{theme.CODE_FILL}"/>')
        r._r.get_or_add_rPr().insert_element_before(shd, *_RPR_SHD_SUCCESSORS)
        return r
    return _add_run(paragraph, run.text, size=run.size, bold=run.bold, italic=run.italic)


def _add_page_number_field(paragraph: DocxParagraph, *, size: int, color: str) -> None:
    """Append a live PAGE field; Word fills in the number at layout time."""
    field = parse_xml(
        f'<w:fldSimple {nsdecls("w")} w:instr="PAGE">'
        f'<w:r><w:rPr><w:rFonts w:ascii="{theme.FONT}" w:hAnsi="{theme.FONT}"/>'
        f'<w:color w:val="{color}"/><w:sz w:val="{size}"/><w:szCs w:val="{size}"/></w:rPr></w:r>'
        f"</w:fldSimple>"
    )
    paragraph._p.append(field)


def _drop_theme_fonts(r_pr) -> None:
    if r_pr is None or r_pr.rFonts is None:
        return
    for attr in _THEME_FONT_ATTRS:
        r_pr.rFonts.attrib.pop(qn(attr), None)


# --- paragraph / table XML helpers ---


def _set_spacing(paragraph: DocxParagraph, before: int, after: int) -> None:
    paragraph.paragraph_format.space_before = Twips(before)
    paragraph.paragraph_format.space_after = Twips(after)


def _set_paragraph_border(paragraph: DocxParagraph, edge: str, *, size: int, color: str, space: int) -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    p_bdr = parse_xml(
        f'<w:pBdr {nsdecls("w")}>'
        f'<w:{edge} w:val="single" w:sz="{size}" w:space="{space}" w:color="{color}"/>'
        f"</w:pBdr>"
    )
    p_pr.insert_element_before(p_bdr, *_PBDR_SUCCESSORS)


def _set_table_width(table: DocxTable, width: int) -> None:
    tbl_pr = table._tbl.tblPr
    tbl_w = tbl_pr.find(qn("w:tblW"))
    if tbl_w is None:
        tbl_w = parse_xml(f'<w:tblW {nsdecls("w")}/>')
        tbl_pr.append(tbl_w)
    tbl_w.set(qn("w:w"), str(width))
    tbl_w.set(qn("w:type"), "dxa")


def _set_cell_borders(tc_pr) -> None:
    edges = "".join(
        f'<w:{edge} w:val="single" w:sz="{theme.CELL_BORDER_SIZE}" w:space="0" w:color="{theme.RULE_COLOR}"/>'
        for edge in ("top", "left", "bottom", "right")
    )
    borders = parse_xml(f'<w:tcBorders {nsdecls("w")}>{edges}</w:tcBorders>')
    tc_pr.insert_element_before(borders, *_TC_BORDERS_SUCCESSORS)


def _set_cell_shading(tc_pr, fill: str) -> None:
    shd = parse_xml(f'<w:shd {nsdecls("w")} w:val="clear" w:color="auto" w:fill="{fill}"/>')
    tc_pr.insert_element_before(shd, *_TC_SHD_SUCCESSORS)


def _set_cell_margins(tc_pr) -> None:
    v, h = theme.CELL_MARGIN_VERTICAL, theme.CELL_MARGIN_HORIZONTAL
    margins = "".join(
        f'<w:{edge} w:w="{w}" w:type="dxa"/>'
        for edge, w in (("top", v), ("left", h), ("bottom", v), ("right", h))
    )
    tc_mar = parse_xml(f'<w:tcMar {nsdecls("w")}>{margins}</w:tcMar>')
    tc_pr.insert_element_before(tc_mar, *_TC_MAR_SUCCESSORS)
