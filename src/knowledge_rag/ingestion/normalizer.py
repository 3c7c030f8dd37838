"""Text normalisation — whitespace, boilerplate lines, and HTML stripping.

Everything here is a pure function of its input; none of it can fail.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

_BOILERPLATE_RE = re.compile(r"^\s*(cookies?|privacy|terms|subscribe|sign in|login)\b", re.IGNORECASE)
_MIN_LINE_LENGTH = 3
_NON_CONTENT_TAGS = ["script", "style", "noscript"]
_BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "br", "dd", "div", "dl", "dt", "footer",
    "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p",
    "pre", "section", "table", "td", "th", "tr", "ul",
]


def normalize_whitespace(text: str) -> str:
    """Unify line endings, cap blank-line runs, and collapse spaces/tabs."""
    text = re.sub(r"\r\n|\r", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"[\t ]{2,}", " ", text)
    return text.strip()


def strip_boilerplate(text: str) -> str:
    """Drop blank lines, cookie/legal/login banners, and very short lines."""
    kept: list[str] = []
    for line in text.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        if _BOILERPLATE_RE.match(stripped):
            continue
        if len(stripped) < _MIN_LINE_LENGTH:
            continue
        kept.append(line)
    return "\n".join(kept)


def clean_text(text: str | None) -> str:
    """Full normalisation pass: whitespace first, then boilerplate."""
    if not text:
        return ""
    return strip_boilerplate(normalize_whitespace(text))


def html_to_text(html: str) -> str:
    """Convert raw HTML to cleaned plain text.

    Script, style and noscript elements are removed before extraction;
    entities (``&nbsp;``, ``&amp;`` …) are decoded by the parser.  Line
    breaks follow block-level elements only, so inline markup (``<b>``,
    ``<a>``, ``<span>``) stays inside its sentence.
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()
    for tag in soup.find_all(_BLOCK_TAGS):
        tag.insert_before("\n")
        tag.insert_after("\n")
    text = soup.get_text().replace("\xa0", " ")
    return clean_text(text)


def normalize_url(url: str) -> str:
    """Document identity: the URL with query string and fragment removed."""
    return url.split("#", 1)[0].split("?", 1)[0]
