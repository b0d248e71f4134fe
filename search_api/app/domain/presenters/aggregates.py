"""
집계 응답 표시.

필드별:
    {"options": [{"value": {...확장된 값, "example_info": {...}}, "documents": n}],
     "documents_with_no_value": n, "total_options": n, "missing_options": n,
     "scope": "exclude_field_filter"}
"""

from __future__ import annotations

from typing import Any

from search_api.app.domain.presenters.entity_expander import EntityExpander
from search_api.app.domain.query.aggregates import (
    CARDINALITY_AGGREGATION,
    MISSING_AGGREGATION,
    TERMS_AGGREGATION,
)
from search_api.app.domain.query.parameters import QueryParameters

JSONDict = dict[str, Any]

AGGREGATE_SCOPE = "exclude_field_filter"


class AggregatesPresenter:
    def __init__(self, aggregations: JSONDict, examples: dict[str, dict[Any, JSONDict]],
                 params: QueryParameters, expander: EntityExpander):
        self._aggregations = aggregations or {}
        self._examples = examples or {}
        self._params = params
        self._expander = expander

    def _option(self, field: str, bucket: JSONDict) -> JSONDict:
        value = self._expander.expand_value(field, bucket["key"])
        example_info = self._examples.get(field, {}).get(bucket["key"])
        if example_info is not None:
            value = {**value, "example_info": example_info}
        return {"value": value, "documents": bucket.get("doc_count", 0)}

    def present_field(self, field: str) -> JSONDict:
        request = self._params.aggregates[field]
        agg = self._aggregations.get(field) or {}
        buckets = (agg.get(TERMS_AGGREGATION) or {}).get("buckets", [])
        options = [self._option(field, b) for b in buckets[: request.requested]]
        total_options = (agg.get(CARDINALITY_AGGREGATION) or {}).get("value", len(buckets))
        total_options = max(total_options, len(options))
        return {
            "options": options,
            "documents_with_no_value": (agg.get(MISSING_AGGREGATION) or {}).get("doc_count", 0),
            "total_options": total_options,
            "missing_options": max(0, total_options - len(options)),
            "scope": AGGREGATE_SCOPE,
        }

    def present(self) -> dict[str, JSONDict]:
        return {field: self.present_field(field) for field in self._params.aggregates}
