"""하이라이트 요청. *_with_highlighting 필드를 요청했을 때만 만든다."""

from __future__ import annotations

from typing import Any, Optional

from search_api.app.domain.query.parameters import QueryParameters

HIGHLIGHTABLE_FIELDS = {
    "title": {"number_of_fragments": 0},
    "description": {"number_of_fragments": 1, "fragment_size": 285},
}


def highlight(params: QueryParameters) -> Optional[dict[str, Any]]:
    fields = {
        name: dict(options)
        for name, options in HIGHLIGHTABLE_FIELDS.items()
        if params.field_requested(f"{name}_with_highlighting")
    }
    if not fields:
        return None
    return {
        "pre_tags": ["<mark>"],
        "post_tags": ["</mark>"],
        "encoder": "html",
        "fields": fields,
    }
