"""
하이라이트 표시값.

엔진이 준 조각은 이미 이스케이프된 마크업이므로 그대로 쓰고,
조각이 없으면 원문을 HTML 이스케이프해서 쓴다.
"""

from __future__ import annotations

import html
from typing import Any, Optional

DESCRIPTION_SEPARATOR = "…"


def _fragments(raw_result: dict[str, Any], field: str) -> list[str]:
    return (raw_result.get("highlight") or {}).get(field) or []


def _source(raw_result: dict[str, Any]) -> dict[str, Any]:
    return raw_result.get("_source") or raw_result.get("fields") or {}


def _text(value: Any) -> str:
    if isinstance(value, list):
        value = value[0] if value else ""
    return "" if value is None else str(value)


def highlighted_title(raw_result: dict[str, Any]) -> str:
    fragments = _fragments(raw_result, "title")
    if fragments:
        return fragments[0]
    return html.escape(_text(_source(raw_result).get("title")))


def highlighted_description(raw_result: dict[str, Any]) -> Optional[str]:
    fragments = _fragments(raw_result, "description")
    if fragments:
        return DESCRIPTION_SEPARATOR.join(fragments)
    description = _source(raw_result).get("description")
    if description is None:
        return None
    return html.escape(_text(description))
