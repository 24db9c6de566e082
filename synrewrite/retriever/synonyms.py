from __future__ import annotations

"""Synonym expansion for query-string searches.

A search for ``dagis`` against a dictionary ``{"dagis": {"forskola", "lekis"}}``
is rewritten to ``((dagis) (forskola)) ((dagis) (lekis))`` so documents using
any of the synonyms are found as well. Steps, in order:

- normalize the raw text and extract at most 50 phrases
- build every contiguous run of phrases ("Alloy tech now" gives ``Alloy``,
  ``Alloy tech``, ``Alloy tech now``, ``tech``, ``tech now`` and ``now``)
- keep the runs found in the dictionary, and the original phrases that share
  no term with any of them
- expand each kept run into one OR group per synonym
- join everything into one query with ``default_operator=OR`` and, when the
  caller asked for AND, a ``minimum_should_match`` relaxation instead.

Nothing here raises: a query that cannot be expanded comes back as
:class:`Unchanged` together with the reason.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, Dict, Iterable, List, Mapping, Protocol, Sequence, Set, Tuple, Union

from synrewrite.app.tracing import TraceEvent, TraceSink, log_trace_event
from synrewrite.retriever.query import (
    BooleanOperator,
    MinShouldMatchQueryStringQuery,
    MultiFieldQueryStringQuery,
)
from synrewrite.shared.normalize import escape_phrase, is_quoted, normalize_query, tokenize

logger = logging.getLogger("synrewrite.rewrite")

SynonymDictionary = Mapping[str, AbstractSet[str]]

MIN_SHOULD_MATCH_EXPANDED_ONLY = "1<40%"
MIN_SHOULD_MATCH_DEFAULT = "2<60%"

SYNONYMS_DISABLED_MESSAGE = (
    "Your index does not support synonyms. Please contact support to have your "
    "account upgraded. Falling back to search without synonyms."
)
UNSUPPORTED_QUERY_MESSAGE = (
    "The use of synonyms are only supported for QueryStringQueries. "
    "The query will be executed without the use of synonyms."
)

_TRACE_SOURCE = "synonyms"


class UnchangedReason(str, Enum):
    SYNONYMS_DISABLED = "synonyms_disabled"
    UNSUPPORTED_QUERY = "unsupported_query"
    EMPTY_QUERY = "empty_query"
    NO_PHRASES = "no_phrases"
    NO_CANDIDATES = "no_candidates"


@dataclass(frozen=True)
class Rewritten:
    query: MinShouldMatchQueryStringQuery
    rewritten: bool = True


@dataclass(frozen=True)
class Unchanged:
    query: object
    reason: UnchangedReason
    rewritten: bool = False


RewriteResult = Union[Rewritten, Unchanged]


class SynonymSource(Protocol):
    def get_synonyms(self) -> SynonymDictionary: ...


def variation_positions(phrases: Sequence[str]) -> Dict[str, Tuple[int, int]]:
    """Map every contiguous run of *phrases* to its first (start, length).

    Runs are joined by single spaces, as in :func:`phrase_variations`.
    """

    positions: Dict[str, Tuple[int, int]] = {}
    count = len(phrases)
    for start in range(count):
        for length in range(1, count - start + 1):
            positions.setdefault(" ".join(phrases[start : start + length]), (start, length))
    return positions


def phrase_variations(phrases: Sequence[str]) -> Set[str]:
    """Return every contiguous run of *phrases* joined by single spaces."""

    return set(variation_positions(phrases))


def phrases_to_expand(variations: Iterable[str], synonyms: SynonymDictionary) -> Set[str]:
    return {variation for variation in variations if variation in synonyms}


def phrases_not_to_expand(phrases: Sequence[str], to_expand: AbstractSet[str]) -> List[str]:
    """Return the original phrases that stay literal, in query order.

    A phrase is dropped when it is expanded itself or when it is one of the
    terms of an expanded run, so no term is matched twice.
    """

    expanded_terms: Set[str] = set()
    for phrase in to_expand:
        expanded_terms.update(term for term in phrase.split(" ") if term)

    kept: List[str] = []
    for phrase in phrases:
        if phrase in to_expand or phrase in expanded_terms or phrase in kept:
            continue
        kept.append(phrase)
    return kept


def _and_join(text: str) -> str:
    escaped = escape_phrase(text)
    if is_quoted(text):
        return escaped
    return escaped.replace(" ", " AND ")


def expand_phrase(phrase: str, synonyms: Iterable[str]) -> str:
    """Expand *phrase* into one ``((phrase) (synonym))`` group per synonym.

    Phrase and synonyms are escaped for the query syntax, and unquoted
    multi-word ones have their terms AND-joined. Groups are separated by a
    space, i.e. OR-ed by the top-level operator.
    """

    left = _and_join(phrase)
    groups = [f"(({left}) ({_and_join(synonym)}))" for synonym in sorted(set(synonyms))]
    return " ".join(groups)


def expand_phrases(
    to_expand: AbstractSet[str],
    synonyms: SynonymDictionary,
    positions: Mapping[str, Tuple[int, int]] | None = None,
) -> List[str]:
    """Expand every phrase of *to_expand*.

    Fragments follow the first position of their phrase as given by
    :func:`variation_positions`; phrases without one are sorted to the end
    alphabetically.
    """

    positions = positions or {}
    fallback = (len(positions), 0)
    ordered = sorted(to_expand, key=lambda phrase: (positions.get(phrase, fallback), phrase))

    fragments: List[str] = []
    for phrase in ordered:
        fragment = expand_phrase(phrase, synonyms.get(phrase, ()))
        if fragment and fragment not in fragments:
            fragments.append(fragment)
    return fragments


def minimum_should_match(not_expanded: Sequence[str], expanded: Sequence[str]) -> str:
    # Only synonym expansions: be less strict on required matches.
    if not not_expanded and expanded:
        return MIN_SHOULD_MATCH_EXPANDED_ONLY
    return MIN_SHOULD_MATCH_DEFAULT


def create_query(
    phrases: Sequence[str],
    current: MultiFieldQueryStringQuery,
    min_should_match: str,
) -> MinShouldMatchQueryStringQuery:
    """Build the rewritten query from already escaped *phrases*.

    Fields and analyzer are copied from *current*. The rewritten query is
    always OR-ed at the top level. An AND query gets *min_should_match* in
    place of its strict conjunction.
    """

    relaxation = min_should_match if current.default_operator == BooleanOperator.AND else None
    return MinShouldMatchQueryStringQuery(
        query=" ".join(phrases),
        fields=list(current.fields),
        analyzer=current.analyzer,
        default_operator=BooleanOperator.OR,
        minimum_should_match=relaxation,
    )


def rewrite_query(
    query: object,
    synonyms: SynonymDictionary,
    synonyms_enabled: bool = True,
    notify: TraceSink = log_trace_event,
) -> RewriteResult:
    """Rewrite *query* so it also matches the synonyms in *synonyms*.

    *synonyms* is a snapshot owned by its loader; it is only read. Keys are
    expected in the form :func:`normalize_phrase` produces, since the query
    text is diacritic-stripped before lookup.
    """

    if not synonyms_enabled:
        notify(TraceEvent(_TRACE_SOURCE, SYNONYMS_DISABLED_MESSAGE))
        return Unchanged(query, UnchangedReason.SYNONYMS_DISABLED)

    if not isinstance(query, MultiFieldQueryStringQuery):
        notify(TraceEvent(_TRACE_SOURCE, UNSUPPORTED_QUERY_MESSAGE))
        return Unchanged(query, UnchangedReason.UNSUPPORTED_QUERY)

    text = query.query or ""
    if not text:
        return Unchanged(query, UnchangedReason.EMPTY_QUERY)

    phrases = tokenize(normalize_query(text))
    if not phrases:
        logger.debug("no phrases extracted from %r", text)
        return Unchanged(query, UnchangedReason.NO_PHRASES)

    positions = variation_positions(phrases)
    to_expand = phrases_to_expand(positions, synonyms)
    not_expanded = phrases_not_to_expand(phrases, to_expand)
    expanded = expand_phrases(to_expand, synonyms, positions)

    all_phrases: List[str] = []
    for phrase in [*map(escape_phrase, not_expanded), *expanded]:
        if phrase not in all_phrases:
            all_phrases.append(phrase)
    if not all_phrases:
        return Unchanged(query, UnchangedReason.NO_CANDIDATES)

    min_should_match = minimum_should_match(not_expanded, expanded)
    logger.debug(
        "rewrite phrases=%d expanded=%s literal=%d msm=%s",
        len(phrases),
        sorted(to_expand),
        len(not_expanded),
        min_should_match,
    )
    return Rewritten(create_query(all_phrases, query, min_should_match))


class SynonymRewriter:
    """Applies synonym expansion using the current snapshot of *source*."""

    def __init__(
        self,
        source: SynonymSource,
        synonyms_enabled: bool = True,
        notify: TraceSink = log_trace_event,
    ) -> None:
        self._source = source
        self.synonyms_enabled = synonyms_enabled
        self._notify = notify

    def rewrite(self, query: object, notify: TraceSink | None = None) -> RewriteResult:
        sink = notify or self._notify
        if not self.synonyms_enabled:
            return rewrite_query(query, {}, synonyms_enabled=False, notify=sink)
        return rewrite_query(query, self._source.get_synonyms(), notify=sink)
