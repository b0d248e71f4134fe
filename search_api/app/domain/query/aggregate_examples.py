"""
집계 예시 문서 조회.

examples:M을 요청한 집계 필드마다, 응답에 나온 각 버킷 값에 대해
예시 문서 M건을 가져온다. 모든 쿼리는 한 번의 multi_search로 보낸다.
- example_scope=global: 버킷 값 조건만
- example_scope=query: 사용자 검색어와 필터까지 적용
"""

from __future__ import annotations

import logging
from typing import Any, List, Tuple

from search_api.app.domain.ports import SearchPort
from search_api.app.domain.query.aggregates import TERMS_AGGREGATION
from search_api.app.domain.query.builder import QueryBuilder
from search_api.app.domain.query.parameters import AggregateRequest

log = logging.getLogger(__name__)

JSONDict = dict[str, Any]


def hits_total(hits: JSONDict) -> int:
    total = hits.get("total", 0)
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total or 0)


def aggregate_buckets(response: JSONDict, field: str) -> List[JSONDict]:
    agg = (response.get("aggregations") or {}).get(field) or {}
    return (agg.get(TERMS_AGGREGATION) or {}).get("buckets", [])


class AggregateExampleFetcher:
    def __init__(self, searcher: SearchPort, response: JSONDict, builder: QueryBuilder):
        self._searcher = searcher
        self._response = response
        self._builder = builder
        self._params = builder.params

    def _example_query(self, request: AggregateRequest, value: Any) -> JSONDict:
        term = {"term": {request.field_name: value}}
        if request.example_scope == "query":
            clauses: list[JSONDict] = [term]
            result_filter = self._builder.filter()
            if result_filter is not None:
                clauses.append(result_filter)
            query = {"bool": {"must": [self._builder.query()], "filter": clauses}}
        else:
            query = {"bool": {"filter": [term]}}
        return {
            "query": query,
            "size": request.examples,
            "track_total_hits": True,
            "_source": list(request.example_fields),
        }

    def fetch(self) -> dict[str, dict[Any, JSONDict]]:
        """
        Returns:
            {field: {bucket value: {"total": n, "examples": [source, ...]}}}
        """
        targets: List[Tuple[str, Any]] = []
        payloads: List[JSONDict] = []
        for field, request in self._params.aggregates.items():
            if request.examples <= 0:
                continue
            for bucket in aggregate_buckets(self._response, field)[: request.requested]:
                targets.append((field, bucket["key"]))
                payloads.append(self._example_query(request, bucket["key"]))

        if not payloads:
            return {}

        log.info("aggregate_examples: queries=%d", len(payloads))
        responses = self._searcher.multi_search(payloads)

        examples: dict[str, dict[Any, JSONDict]] = {}
        for (field, value), response in zip(targets, responses):
            hits = response.get("hits") or {}
            examples.setdefault(field, {})[value] = {
                "total": hits_total(hits),
                "examples": [hit.get("_source") or {} for hit in hits.get("hits", [])],
            }
        return examples
