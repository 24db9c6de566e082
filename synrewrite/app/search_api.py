from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from synrewrite.app.tracing import TraceCollector
from synrewrite.retriever.query import BooleanOperator, MultiFieldQueryStringQuery
from synrewrite.retriever.synonyms import SynonymRewriter, SynonymSource
from synrewrite.shared.normalize import normalize_phrase
from synrewrite.store.synonym_loader import SynonymLoader

_DEFAULT_SYNONYMS_PATH = Path(__file__).resolve().parents[1] / "shared" / "normalize" / "synonyms.yaml"

SYNONYMS_PATH = Path(os.getenv("SYNONYMS_PATH", str(_DEFAULT_SYNONYMS_PATH)))
SYNONYMS_ENABLED = os.getenv("SYNONYMS_ENABLED", "1") == "1"
SYNONYMS_REFRESH_SECONDS = max(0.0, float(os.getenv("SYNONYMS_REFRESH_SECONDS", "300")))
SYNONYMS_BIDIRECTIONAL = os.getenv("SYNONYMS_BIDIRECTIONAL", "0") == "1"


class RewriteIn(BaseModel):
    query: Optional[str] = None
    fields: List[str] = Field(default_factory=list)
    analyzer: Optional[str] = None
    default_operator: BooleanOperator = BooleanOperator.OR


class RewriteOut(BaseModel):
    rewritten: bool
    reason: Optional[str] = None
    query: Dict[str, Any]
    diagnostics: List[str] = Field(default_factory=list)


router = APIRouter(prefix="/api/search")


@lru_cache(maxsize=1)
def get_synonym_loader() -> SynonymSource:
    return SynonymLoader(
        SYNONYMS_PATH,
        refresh_seconds=SYNONYMS_REFRESH_SECONDS,
        bidirectional=SYNONYMS_BIDIRECTIONAL,
    )


def synonyms_enabled() -> bool:
    return SYNONYMS_ENABLED


@router.post("/rewrite", response_model=RewriteOut)
def rewrite(
    payload: RewriteIn = Body(...),
    source: SynonymSource = Depends(get_synonym_loader),
    enabled: bool = Depends(synonyms_enabled),
):
    current = MultiFieldQueryStringQuery(
        query=payload.query,
        fields=payload.fields,
        analyzer=payload.analyzer,
        default_operator=payload.default_operator,
    )
    collector = TraceCollector()
    result = SynonymRewriter(source, synonyms_enabled=enabled).rewrite(current, notify=collector)
    return RewriteOut(
        rewritten=result.rewritten,
        reason=None if result.rewritten else result.reason.value,
        query=result.query.to_request_body(),
        diagnostics=collector.messages,
    )


@router.get("/synonyms")
def list_synonyms(
    phrase: Optional[str] = Query(None),
    source: SynonymSource = Depends(get_synonym_loader),
):
    snapshot = source.get_synonyms()
    if phrase is None:
        return {key: sorted(values) for key, values in sorted(snapshot.items())}
    key = normalize_phrase(phrase)
    if key not in snapshot:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Phrase not found")
    return {key: sorted(snapshot[key])}
