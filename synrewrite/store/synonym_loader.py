from __future__ import annotations

"""YAML-backed synonym dictionary with periodic refresh.

The schema is ``{phrase: [synonym, ...]}``. Keys and synonyms are stored
diacritic-stripped with collapsed whitespace, the same form query phrases
take before lookup, so an entry such as ``förskola`` matches a query for
``forskola`` and vice versa. Case and quotes are kept as authored.
"""

import logging
import threading
import time
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Set

import yaml

from synrewrite.shared.normalize import normalize_phrase

logger = logging.getLogger("synrewrite.synonyms")

SynonymSnapshot = Mapping[str, FrozenSet[str]]

_EMPTY: SynonymSnapshot = MappingProxyType({})


def _as_list(value: object) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value if item is not None]
    return [str(value)]


def normalize_synonyms(
    entries: Mapping[str, Iterable[str]],
    bidirectional: bool = False,
) -> SynonymSnapshot:
    """Normalize raw *entries* into an immutable snapshot.

    Empty keys and synonyms are dropped, a phrase never lists itself and
    keys left without synonyms are omitted. With *bidirectional* every
    synonym also maps back to its phrase.
    """

    collected: Dict[str, Set[str]] = {}
    for raw_key, raw_values in entries.items():
        key = normalize_phrase(str(raw_key))
        if not key:
            continue
        for raw_value in _as_list(raw_values):
            value = normalize_phrase(raw_value)
            if not value or value == key:
                continue
            collected.setdefault(key, set()).add(value)
            if bidirectional:
                collected.setdefault(value, set()).add(key)

    return MappingProxyType({key: frozenset(values) for key, values in collected.items() if values})


def load_synonyms(path: str | Path, bidirectional: bool = False) -> SynonymSnapshot:
    """Load and normalize the synonym mapping stored at *path*."""

    content = Path(path).read_text(encoding="utf-8")
    loaded = yaml.safe_load(content) or {}
    if not isinstance(loaded, dict):
        raise ValueError("synonyms YAML must define a mapping")
    return normalize_synonyms(loaded, bidirectional=bidirectional)


class SynonymLoader:
    """Owns the synonym snapshot and replaces it when it gets stale.

    Readers receive the current snapshot by reference. A refresh builds a
    new mapping and swaps the reference, so snapshots already handed out
    never change. *refresh_seconds* of ``0`` turns automatic refresh off.
    """

    def __init__(
        self,
        path: str | Path,
        refresh_seconds: float = 300.0,
        bidirectional: bool = False,
        clock=time.monotonic,
    ) -> None:
        self.path = Path(path)
        self.refresh_seconds = max(0.0, float(refresh_seconds))
        self.bidirectional = bidirectional
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: SynonymSnapshot = _EMPTY
        self._attempted_at: float | None = None
        self._loaded_at: float | None = None

    def get_synonyms(self) -> SynonymSnapshot:
        with self._lock:
            if self._is_stale():
                self._reload()
            return self._snapshot

    def refresh(self) -> SynonymSnapshot:
        with self._lock:
            self._reload()
            return self._snapshot

    def stats(self) -> Dict[str, object]:
        with self._lock:
            snapshot = self._snapshot
            loaded_at = self._loaded_at
        return {
            "path": str(self.path),
            "phrases": len(snapshot),
            "synonyms": sum(len(values) for values in snapshot.values()),
            "loaded": loaded_at is not None,
        }

    def _is_stale(self) -> bool:
        if self._attempted_at is None:
            return True
        if not self.refresh_seconds:
            return False
        return self._clock() - self._attempted_at >= self.refresh_seconds

    def _reload(self) -> None:
        now = self._clock()
        self._attempted_at = now
        try:
            snapshot = load_synonyms(self.path, bidirectional=self.bidirectional)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            logger.warning("Could not load synonyms from %s: %s", self.path, exc)
        else:
            self._snapshot = snapshot
            self._loaded_at = now
            logger.info("synonyms loaded path=%s phrases=%d", self.path, len(snapshot))


class StaticSynonymSource:
    """Fixed snapshot, normalized once; handy for tests and embedding."""

    def __init__(self, entries: Mapping[str, Iterable[str]], bidirectional: bool = False) -> None:
        self._snapshot = normalize_synonyms(entries, bidirectional=bidirectional)

    def get_synonyms(self) -> SynonymSnapshot:
        return self._snapshot
