"""End-to-end markdown → .docx conversion."""

from __future__ import annotations

from loguru import logger

from .block_parser import parse_blocks
from .blocks import DocumentOptions
from .renderer import render


async def markdown_to_docx(markdown: str, options: DocumentOptions | None = None) -> bytes:
    """Convert markdown text into the bytes of a complete .docx file."""
    options = options or DocumentOptions()
    blocks = parse_blocks(markdown)
    data = await render(blocks, options)
    logger.debug("Converted {} chars of markdown into {} bytes of docx", len(markdown), len(data))
    return data
