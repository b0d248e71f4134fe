from __future__ import annotations

from typing import Any, Optional

from search_api.app.domain.query.parameters import QueryParameters


def sort(params: QueryParameters) -> Optional[list[dict[str, Any]]]:
    """order=-public_timestamp → [{"public_timestamp": {"order": "desc"}}], 없으면 관련도순(None)"""
    if params.order is None:
        return None
    field, direction = params.order
    return [{field: {"order": direction, "missing": "_last"}}]
