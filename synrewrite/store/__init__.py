"""Synonym dictionary sources."""

from .synonym_loader import (
    StaticSynonymSource,
    SynonymLoader,
    load_synonyms,
    normalize_synonyms,
)

__all__ = [
    "StaticSynonymSource",
    "SynonymLoader",
    "load_synonyms",
    "normalize_synonyms",
]
