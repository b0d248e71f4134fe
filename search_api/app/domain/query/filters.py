"""
필터 절 생성.

모든 filter는 AND(bool.filter), reject는 bool.must_not으로 들어간다.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from search_api.app.domain.query.parameters import SearchFilter

JSONDict = dict[str, Any]


def filter_clause(search_filter: SearchFilter) -> JSONDict:
    field = search_filter.field_name
    if search_filter.is_range:
        bounds = {}
        if search_filter.before is not None:
            bounds["lt"] = search_filter.before.isoformat()
        if search_filter.after is not None:
            bounds["gt"] = search_filter.after.isoformat()
        return {"range": {field: bounds}}
    if len(search_filter.values) == 1:
        return {"term": {field: search_filter.values[0]}}
    return {"terms": {field: list(search_filter.values)}}


def combined_filter(filters: Iterable[SearchFilter]) -> Optional[JSONDict]:
    """
    Returns:
        JSONDict | None: bool 필터 (필터가 없으면 None)
    """
    must, must_not = [], []
    for search_filter in filters:
        clause = filter_clause(search_filter)
        (must_not if search_filter.operation == "reject" else must).append(clause)
    if not must and not must_not:
        return None
    combined: JSONDict = {}
    if must:
        combined["filter"] = must
    if must_not:
        combined["must_not"] = must_not
    return {"bool": combined}
