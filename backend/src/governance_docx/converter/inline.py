"""Inline markdown (emphasis, code, links) → styled text runs."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .blocks import TextRun
from .theme import BODY_SIZE

_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
# Positions where a span could start; everything else is skipped in one step.
_SPAN_START_RE = re.compile(r"[*`]")


@dataclass(frozen=True)
class SpanMatcher:
    name: str
    pattern: re.Pattern[str]
    bold: bool = False
    italic: bool = False
    is_code: bool = False


# Tried in order at every scan position; the first that matches wins.
SPAN_MATCHERS: tuple[SpanMatcher, ...] = (
    SpanMatcher("bold_italic", re.compile(r"\*\*\*(.+?)\*\*\*"), bold=True, italic=True),
    SpanMatcher("bold", re.compile(r"\*\*(.+?)\*\*"), bold=True),
    SpanMatcher("italic", re.compile(r"\*(.+?)\*"), italic=True),
    SpanMatcher("code", re.compile(r"`(.+?)`"), is_code=True),
)


def rewrite_links(text: str) -> str:
    """Replace every `[label](url)` with `label (url)`."""
    return _LINK_RE.sub(r"\1 (\2)", text)


def match_span(text: str, pos: int) -> tuple[SpanMatcher, re.Match[str]] | None:
    """Return the first matcher (in precedence order) that matches exactly at pos."""
    for matcher in SPAN_MATCHERS:
        m = matcher.pattern.match(text, pos)
        if m:
            return matcher, m
    return None


def parse_inline(text: str, base_size: int = BODY_SIZE) -> list[TextRun]:
    """Split text into runs. Never returns an empty list."""
    text = rewrite_links(text)
    runs: list[TextRun] = []
    plain_start = 0
    pos = 0
    while True:
        start = _SPAN_START_RE.search(text, pos)
        if start is None:
            break
        pos = start.start()
        found = match_span(text, pos)
        if found is None:
            pos += 1
            continue
        matcher, m = found
        if pos > plain_start:
            runs.append(TextRun(text=text[plain_start:pos], size=base_size))
        runs.append(
            TextRun(
                text=m.group(1),
                bold=matcher.bold,
                italic=matcher.italic,
                is_code=matcher.is_code,
                size=base_size,
            )
        )
        pos = plain_start = m.end()
    if not runs:
        return [TextRun(text=text, size=base_size)]
    if plain_start < len(text):
        runs.append(TextRun(text=text[plain_start:], size=base_size))
    return runs
