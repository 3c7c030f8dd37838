"""Unit tests for text and HTML normalisation."""

from __future__ import annotations

from knowledge_rag.ingestion.normalizer import (
    clean_text,
    html_to_text,
    normalize_url,
    normalize_whitespace,
    strip_boilerplate,
)


def test_normalize_whitespace_collapses_runs() -> None:
    text = "a\r\nb\r\n\n\n\nc\t\t d   e  "
    assert normalize_whitespace(text) == "a\nb\n\nc d e"


def test_strip_boilerplate_drops_banners_and_short_lines() -> None:
    text = "\n".join([
        "Cookies help us deliver our services.",
        "Privacy Policy",
        "Sign in",
        "ok",
        "Aven offers a card backed by home equity.",
    ])
    assert strip_boilerplate(text) == "Aven offers a card backed by home equity."


def test_strip_boilerplate_keeps_lines_mentioning_terms_midway() -> None:
    line = "Read the card terms before applying."
    assert strip_boilerplate(line) == line


def test_clean_text_handles_none_and_empty() -> None:
    assert clean_text(None) == ""
    assert clean_text("") == ""


def test_html_to_text_drops_scripts_and_decodes_entities() -> None:
    html = """
    <html><head><style>body { color: red; }</style>
    <script>var tracking = true;</script></head>
    <body>
      <noscript>Enable JavaScript</noscript>
      <h1>Balance&nbsp;transfers</h1>
      <p>Move balances &amp; save on interest.</p>
    </body></html>
    """
    text = html_to_text(html)
    assert "tracking" not in text
    assert "color" not in text
    assert "Enable JavaScript" not in text
    assert "Balance transfers" in text
    assert "Move balances & save on interest." in text


def test_normalize_url_strips_query_and_fragment() -> None:
    assert normalize_url("https://www.aven.com/help?utm=1#faq") == "https://www.aven.com/help"
    assert normalize_url("https://www.aven.com/") == "https://www.aven.com/"


def test_html_to_text_keeps_inline_markup_in_sentence() -> None:
    html = "<p>Pay it off <b>in</b> 5 years at <a href='/rates'>a</a> fixed rate.</p>"
    assert html_to_text(html) == "Pay it off in 5 years at a fixed rate."


def test_html_to_text_breaks_lines_at_block_elements() -> None:
    html = (
        "<div>Intro paragraph about <span>home equity</span> lines.</div>"
        "<p>Privacy policy</p>"
        "<ul><li>No annual fee for <em>every</em> customer.</li><li>Fixed rate option.</li></ul>"
    )
    assert html_to_text(html).split("\n") == [
        "Intro paragraph about home equity lines.",
        "No annual fee for every customer.",
        "Fixed rate option.",
    ]
