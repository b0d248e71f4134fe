"""
집계(facet) 요청.

결과 필터는 post_filter로 적용되므로, 각 집계는 자기 필드를 제외한
나머지 필터를 filter 집계로 감싸서 적용한다.
"""

from __future__ import annotations

from typing import Any

from search_api.app.domain.query.filters import combined_filter
from search_api.app.domain.query.parameters import AggregateRequest, QueryParameters

JSONDict = dict[str, Any]

TERMS_AGGREGATION = "filtered_aggregations"
MISSING_AGGREGATION = "missing_aggregation"
CARDINALITY_AGGREGATION = "option_count"


def terms_order(request: AggregateRequest) -> JSONDict:
    if request.order == "value":
        return {"_key": "asc"}
    return {"_count": "desc"}


def aggregate(request: AggregateRequest, params: QueryParameters, max_options: int) -> JSONDict:
    field = request.field_name
    size = max(1, min(request.requested, max_options))
    return {
        "filter": combined_filter(params.filters_excluding(field)) or {"match_all": {}},
        "aggs": {
            TERMS_AGGREGATION: {
                "terms": {"field": field, "size": size, "order": terms_order(request)}
            },
            MISSING_AGGREGATION: {"missing": {"field": field}},
            CARDINALITY_AGGREGATION: {"cardinality": {"field": field}},
        },
    }


def aggregates(params: QueryParameters, max_options: int) -> dict[str, JSONDict]:
    return {
        field: aggregate(request, params, max_options)
        for field, request in params.aggregates.items()
    }
