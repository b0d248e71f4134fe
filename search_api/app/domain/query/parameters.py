"""
검색 요청 1건을 표현하는 값 객체.

SearchParameterParser가 검증을 마친 값으로 한 번 만들고, 이후 요청 처리 동안 읽기만 한다.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator

# 앞뒤 공백을 허용하고, 따옴표 한 쌍으로 감싸며 내부에 따옴표가 없는 경우
QUOTED_STRING_REGEX = re.compile(r'^\s*"[^"]+"\s*$')


class DebugFlags(BaseModel):
    disable_popularity: bool = False
    disable_synonyms: bool = False
    disable_best_bets: bool = False
    disable_boosting: bool = False
    use_id_codes: bool = False
    show_query: bool = False
    new_weighting: bool = False


class SearchFilter(BaseModel):
    """
    필터 1개.
    - operation: filter(일치해야 함) / reject(일치하면 제외)
    - 날짜 필드는 values 대신 before/after 범위를 쓴다.
    """
    field_name: str
    field_type: str = "identifier"
    operation: Literal["filter", "reject"] = "filter"
    multivalued: bool = False
    values: list[Any] = Field(default_factory=list)
    before: Optional[datetime] = None
    after: Optional[datetime] = None

    @property
    def is_range(self) -> bool:
        return self.before is not None or self.after is not None


class AggregateRequest(BaseModel):
    """aggregate_<field>=N,examples:M,... 한 건."""
    field_name: str
    requested: int = 0
    examples: int = 0
    example_fields: list[str] = Field(default_factory=list)
    example_scope: Literal["global", "query"] = "global"
    order: Literal["count", "value"] = "count"


class QueryParameters(BaseModel):
    query: Optional[str] = None
    similar_to: Optional[str] = None
    order: Optional[tuple[str, Literal["asc", "desc"]]] = None
    start: int = 0
    count: int = 10
    return_fields: list[str] = Field(default_factory=list)
    aggregates: dict[str, AggregateRequest] = Field(default_factory=dict)
    filters: list[SearchFilter] = Field(default_factory=list)
    debug: DebugFlags = Field(default_factory=DebugFlags)
    suggest: list[str] = Field(default_factory=list)
    ab_tests: dict[str, str] = Field(default_factory=dict)
    is_quoted_phrase: bool = False

    @model_validator(mode="after")
    def _determine_if_quoted_phrase(self) -> "QueryParameters":
        self.is_quoted_phrase = bool(self.query and QUOTED_STRING_REGEX.match(self.query))
        return self

    def field_requested(self, name: str) -> bool:
        return name in self.return_fields

    @property
    def suggest_spelling(self) -> bool:
        return bool(self.query) and "spelling" in self.suggest

    @property
    def synonym_b_variant(self) -> bool:
        return self.ab_tests.get("synonyms") == "B"

    def ab_variant(self, name: str) -> Optional[str]:
        return self.ab_tests.get(name)

    def filters_excluding(self, field_name: str) -> list[SearchFilter]:
        """집계에서 자기 필드의 필터는 빼고 적용하기 위해 사용."""
        return [f for f in self.filters if f.field_name != field_name]

    @property
    def has_query(self) -> bool:
        return bool(self.query and self.query.strip())
