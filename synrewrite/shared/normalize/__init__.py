"""Utility helpers for query normalization and phrase extraction."""

from .text import (
    MAX_PHRASES,
    escape_phrase,
    escape_query,
    is_quoted,
    normalize_phrase,
    normalize_query,
    strip_diacritics,
    tokenize,
    unescape_query,
)

__all__ = [
    "MAX_PHRASES",
    "escape_phrase",
    "escape_query",
    "is_quoted",
    "normalize_phrase",
    "normalize_query",
    "strip_diacritics",
    "tokenize",
    "unescape_query",
]
