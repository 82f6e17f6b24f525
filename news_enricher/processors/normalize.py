from __future__ import annotations

import html
import re
import unicodedata
from typing import Optional

from bs4 import BeautifulSoup

_whitespace_re = re.compile(r"\s+")
_control_chars_re = re.compile(r"[\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F]")

_PUNCT_TRANSLATION = {
    ord("\u2018"): "'",  # left single quote
    ord("\u2019"): "'",  # right single quote
    ord("\u201C"): '"',  # left double quote
    ord("\u201D"): '"',  # right double quote
    ord("\u00A0"): " ",  # non-breaking space
}

NO_SUMMARY = "No summary available"


def clean_html_to_text(raw_html: str | None) -> str:
    """Strip tags, unescape entities and collapse whitespace."""
    if not raw_html:
        return ""

    soup = BeautifulSoup(raw_html, "html.parser")
    text = soup.get_text(" ")
    text = html.unescape(text)
    text = _whitespace_re.sub(" ", text)
    return text.strip()


def normalize_plain_text(text: str | None) -> str:
    """Normalize plain text for display and classification.

    - Strip BOM
    - Replace curly quotes and non-breaking spaces
    - Unicode normalize (NFKC)
    - Remove control characters and collapse whitespace
    """
    if not text:
        return ""

    if text.startswith("\ufeff"):
        text = text.lstrip("\ufeff")

    text = text.translate(_PUNCT_TRANSLATION)
    text = unicodedata.normalize("NFKC", text)
    text = _control_chars_re.sub(" ", text)
    return _whitespace_re.sub(" ", text).strip()


def build_summary(snippet: Optional[str], content: Optional[str], title: Optional[str]) -> Optional[str]:
    """First non-empty of content snippet, full content, title.

    Full content is used as plain text too, since feeds often ship HTML.
    """
    for candidate in (snippet, content, title):
        text = normalize_plain_text(clean_html_to_text(candidate))
        if text:
            return text
    return None
