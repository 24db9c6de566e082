from __future__ import annotations

"""Normalization and phrase extraction for free-text search queries."""

import re
import unicodedata
from typing import List

MAX_PHRASES = 50

_RE_WHITESPACE = re.compile(r"\s+")
# Bare terms, or double-quoted phrases that may carry spaces and apostrophe variants.
_RE_PHRASE = re.compile(r"([\w-]+)|(\"[\s\w\-´'`]+\")")
_SPECIAL_CHARS = frozenset("+-=!(){}[]^~*?:\\/\"")


def unescape_query(text: str) -> str:
    """Drop the backslash escapes of the boolean query syntax."""

    return text.replace("\\", "")


def escape_query(text: str) -> str:
    """Escape every character the query parser treats as an operator."""

    return "".join(f"\\{ch}" if ch in _SPECIAL_CHARS else ch for ch in text)


def escape_phrase(text: str) -> str:
    """Escape *text* for use as one query clause.

    A fully quoted phrase keeps its surrounding quotes and only the inner
    text is escaped; any other quote is escaped like the other operators.
    """

    if is_quoted(text):
        return f'"{escape_query(text[1:-1])}"'
    return escape_query(text)


def strip_diacritics(text: str) -> str:
    """Return *text* without combining marks (``"förskola"`` -> ``"forskola"``)."""

    if not text:
        return ""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def normalize_query(text: str | None) -> str:
    """Return the logical form of a raw query used for phrase extraction.

    The procedure removes escape characters first, strips diacritic marks
    and finally collapses whitespace runs (tabs included) to a single space.
    Case is preserved. ``None`` and whitespace-only inputs yield ``""``.
    """

    if not text:
        return ""

    normalized = unescape_query(text)
    normalized = strip_diacritics(normalized)
    return _RE_WHITESPACE.sub(" ", normalized).strip()


def normalize_phrase(text: str | None) -> str:
    """Normalize a dictionary key or synonym into the form query phrases take.

    Escapes are removed, diacritics stripped and whitespace collapsed, as
    :func:`normalize_query` does for the query text.
    """

    if not text:
        return ""
    normalized = strip_diacritics(unescape_query(text))
    return _RE_WHITESPACE.sub(" ", normalized).strip()


def tokenize(normalized: str, limit: int = MAX_PHRASES) -> List[str]:
    """Split *normalized* into ordered phrases.

    Bare terms (letters, digits, underscore, hyphen) and double-quoted
    phrases are matched left to right. Quotes stay part of the phrase so a
    quoted phrase is never split further. Only the first *limit* phrases
    are returned.
    """

    if not normalized:
        return []

    phrases: List[str] = []
    for match in _RE_PHRASE.finditer(normalized):
        phrase = match.group(0).strip()
        if not phrase:
            continue
        phrases.append(phrase)
        if len(phrases) >= limit:
            break
    return phrases


def is_quoted(text: str) -> bool:
    return len(text) >= 2 and text.startswith('"') and text.endswith('"')
