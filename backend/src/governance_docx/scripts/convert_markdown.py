"""Convert one markdown file to a styled .docx from the command line.

Usage:
  python -m governance_docx.scripts.convert_markdown POLICY.md [-o POLICY.docx]
      [--title "AI Use Policy"] [--organisation "Acme Ltd"] [--accent-color 1B2A4A]

Env:
  GOVERNANCE_DOCX_ORGANISATION, GOVERNANCE_DOCX_ACCENT_COLOR (defaults)
"""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from loguru import logger

from ..converter import DocumentOptions, markdown_to_docx
from ..logging_config import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="convert_markdown",
        description="Convert governance-template markdown to a Word document",
    )
    parser.add_argument("input", type=Path, help="Markdown file to convert")
    parser.add_argument("-o", "--output", type=Path, help="Output .docx path (default: INPUT with .docx suffix)")
    parser.add_argument("--title", default="", help="Running header text (default: organisation)")
    parser.add_argument("--organisation", default="", help="Organisation shown in header/footer")
    parser.add_argument("--accent-color", default="", help="Accent colour as 6 hex digits")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(level="DEBUG" if args.verbose else None)

    if not args.input.exists():
        raise SystemExit(f"File not found: {args.input}")
    try:
        options = DocumentOptions(
            title=args.title,
            organisation=args.organisation,
            accent_color=args.accent_color,
        )
    except ValueError as e:
        raise SystemExit(str(e)) from None

    markdown = args.input.read_text(encoding="utf-8")
    data = asyncio.run(markdown_to_docx(markdown, options))
    output = args.output or args.input.with_suffix(".docx")
    output.write_bytes(data)
    logger.info("Wrote {} ({} bytes)", output, len(data))


if __name__ == "__main__":
    main()
