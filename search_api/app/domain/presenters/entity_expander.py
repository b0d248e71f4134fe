"""
레지스트리 확장.

결과의 slug/식별자 필드를 레지스트리 항목으로 바꾼다.
찾지 못한 값은 {"slug": 값} 형태로 남긴다.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol

EXPANDABLE_FIELDS = (
    "organisations",
    "specialist_sectors",
    "policy_areas",
    "document_series",
    "document_collections",
    "world_locations",
    "people",
    "taxons",
    "organisation_content_ids",
    "topic_content_ids",
)


class Registry(Protocol):
    def lookup(self, key: str) -> Optional[dict[str, Any]]:
        ...


class EntityExpander:
    def __init__(self, registries: Mapping[str, Registry]):
        self._registries = registries

    def expand_value(self, field: str, value: Any) -> Any:
        registry = self._registries.get(field)
        if isinstance(value, dict):
            # 이미 확장된 값
            return value
        entry = registry.lookup(str(value)) if registry is not None else None
        return dict(entry) if entry is not None else {"slug": value}

    def expand(self, field: str, values: Any) -> Any:
        if isinstance(values, list):
            return [self.expand_value(field, v) for v in values]
        return self.expand_value(field, values)

    def new_result(self, result: Mapping[str, Any]) -> dict[str, Any]:
        expanded = dict(result)
        for field in EXPANDABLE_FIELDS:
            if field in expanded and expanded[field] is not None:
                expanded[field] = self.expand(field, expanded[field])
        return expanded
