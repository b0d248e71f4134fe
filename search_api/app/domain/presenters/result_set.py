"""
검색 응답 전체 표시.

    {"results": [...], "total": n, "start": n, "aggregates": {...},
     "suggested_queries": [...], "search_query": {...}}

search_query는 debug=show_query일 때만 포함된다.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from search_api.app.domain.models import IndexSchema
from search_api.app.domain.presenters.aggregates import AggregatesPresenter
from search_api.app.domain.presenters.entity_expander import EntityExpander, Registry
from search_api.app.domain.presenters.result import ResultPresenter
from search_api.app.domain.presenters.spell_check import SpellCheckPresenter
from search_api.app.domain.query.aggregate_examples import hits_total
from search_api.app.domain.query.parameters import QueryParameters

JSONDict = dict[str, Any]


class ResultSetPresenter:
    def __init__(
        self,
        params: QueryParameters,
        response: JSONDict,
        schema: IndexSchema,
        registries: Optional[Mapping[str, Registry]] = None,
        aggregate_examples: Optional[dict[str, dict[Any, JSONDict]]] = None,
        query_payload: Optional[JSONDict] = None,
    ):
        self._params = params
        self._response = response
        self._expander = EntityExpander(registries or {})
        self._aggregate_examples = aggregate_examples or {}
        self._schema = schema
        self._query_payload = query_payload or {}

    def present(self) -> JSONDict:
        hits = self._response.get("hits") or {}
        presented: JSONDict = {
            "results": [
                ResultPresenter(hit, self._expander, self._schema, self._params).present()
                for hit in hits.get("hits", [])
            ],
            "total": hits_total(hits),
            "start": self._params.start,
            "aggregates": AggregatesPresenter(
                self._response.get("aggregations"),
                self._aggregate_examples,
                self._params,
                self._expander,
            ).present(),
            "suggested_queries": SpellCheckPresenter(self._response.get("suggest")).present(),
        }
        if self._params.debug.show_query:
            presented["search_query"] = self._query_payload
        return presented
