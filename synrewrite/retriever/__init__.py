"""Synonym-aware query rewriting for query-string searches."""

from .query import BooleanOperator, MinShouldMatchQueryStringQuery, MultiFieldQueryStringQuery
from .synonyms import (
    Rewritten,
    SynonymRewriter,
    Unchanged,
    UnchangedReason,
    rewrite_query,
)

__all__ = [
    "BooleanOperator",
    "MinShouldMatchQueryStringQuery",
    "MultiFieldQueryStringQuery",
    "Rewritten",
    "SynonymRewriter",
    "Unchanged",
    "UnchangedReason",
    "rewrite_query",
]
