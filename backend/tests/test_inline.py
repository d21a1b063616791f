from governance_docx.converter import SPAN_MATCHERS, TextRun, parse_inline
from governance_docx.converter.inline import match_span, rewrite_links


def test_plain_text_single_run():
    assert parse_inline("Hello") == [TextRun("Hello")]


def test_empty_string_single_run():
    assert parse_inline("") == [TextRun("")]


def test_emphasis_precedence_six_runs():
    runs = parse_inline("***bold-italic*** and **bold** and *italic* and normal")
    assert [(r.text, r.bold, r.italic, r.is_code) for r in runs] == [
        ("bold-italic", True, True, False),
        (" and ", False, False, False),
        ("bold", True, False, False),
        (" and ", False, False, False),
        ("italic", False, True, False),
        (" and normal", False, False, False),
    ]
    assert "".join(r.text for r in runs) == "bold-italic and bold and italic and normal"


def test_emphasis_runs_with_plain_between():
    runs = parse_inline("x ***a*** **b** *c* `d`")
    assert [r.text for r in runs] == ["x ", "a", " ", "b", " ", "c", " ", "d"]


def test_link_stripping():
    assert parse_inline("[Docs](https://x.test)") == [TextRun("Docs (https://x.test)")]
    runs = parse_inline("See [docs](https://example.com) now")
    assert "".join(r.text for r in runs) == "See docs (https://example.com) now"


def test_rewrite_links_not_recursive():
    assert rewrite_links("[a](b) and [c](d)") == "a (b) and c (d)"


def test_unmatched_markers_stay_plain():
    assert parse_inline("2 * 3 = 6") == [TextRun("2 * 3 = 6")]
    assert parse_inline("**open") == [TextRun("**open")]


def test_base_size_applies_to_all_runs():
    runs = parse_inline("a **b** `c`", base_size=20)
    assert {r.size for r in runs} == {20}


def test_matcher_order_is_explicit():
    assert [m.name for m in SPAN_MATCHERS] == ["bold_italic", "bold", "italic", "code"]
    matcher, m = match_span("**b**", 0)
    assert matcher.name == "bold"
    assert m.group(1) == "b"
    assert match_span("plain", 0) is None


def test_code_does_not_parse_emphasis_inside_earlier_match():
    runs = parse_inline("`a*b*c`")
    assert runs == [TextRun("a*b*c", is_code=True)]
