"""인기도 부스트: 문서의 popularity 값을 점수에 곱한다."""

from __future__ import annotations

from typing import Any

from search_api.app.domain.query.parameters import QueryParameters

JSONDict = dict[str, Any]

POPULARITY_SCRIPT = (
    "(doc['popularity'].size() == 0 ? 0 : doc['popularity'].value) + params.offset"
)


def wrap(query: JSONDict, params: QueryParameters, offset: float) -> JSONDict:
    if params.debug.disable_popularity:
        return query
    return {
        "function_score": {
            "query": query,
            "boost_mode": "multiply",
            "script_score": {
                "script": {"source": POPULARITY_SCRIPT, "params": {"offset": offset}}
            },
        }
    }
