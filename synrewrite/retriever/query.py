from __future__ import annotations

"""Query-string query models and their search request body."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BooleanOperator(str, Enum):
    AND = "AND"
    OR = "OR"


class MultiFieldQueryStringQuery(BaseModel):
    """A free-text query executed against several fields."""

    model_config = ConfigDict(frozen=True)

    query: Optional[str] = None
    fields: List[str] = Field(default_factory=list)
    analyzer: Optional[str] = None
    default_operator: BooleanOperator = BooleanOperator.OR

    def _query_string_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "query": self.query or "",
            "fields": list(self.fields),
            "default_operator": self.default_operator.value,
        }
        if self.analyzer:
            body["analyzer"] = self.analyzer
        return body

    def to_request_body(self) -> Dict[str, Any]:
        return {"query_string": self._query_string_body()}


class MinShouldMatchQueryStringQuery(MultiFieldQueryStringQuery):
    """Query-string query carrying a ``minimum_should_match`` relaxation.

    The relaxation is written as ``"<k><<percent>%"``: when at most *k*
    optional clauses exist all of them are required, above that only
    *percent* of them.
    """

    minimum_should_match: Optional[str] = None

    def _query_string_body(self) -> Dict[str, Any]:
        body = super()._query_string_body()
        if self.minimum_should_match:
            body["minimum_should_match"] = self.minimum_should_match
        return body
