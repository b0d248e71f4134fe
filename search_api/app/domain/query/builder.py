"""
쿼리 조립기.

각 하위 빌더(core_query, booster, popularity, best_bets, filters, aggregates,
highlight, sort)는 QueryParameters를 받아 조각을 돌려주는 순수 함수이고,
QueryBuilder는 그 조각들을 하나의 요청 본문으로 합친다.
"""

from __future__ import annotations

import time
from typing import Any, Callable, List, Optional, Sequence, Tuple

from search_api.app.domain.models import IndexSchema
from search_api.app.domain.query import (
    aggregates,
    best_bets,
    booster,
    core_query,
    filters,
    highlight,
    popularity,
    sort,
)
from search_api.app.domain.query.parameter_parser import COMPUTED_FIELDS
from search_api.app.domain.query.parameters import QueryParameters
from search_api.app.platform.config import Settings, settings as default_settings

JSONDict = dict[str, Any]

# 결과 표시(포맷 분류, 하이라이트 대체값)에 항상 필요한 필드
PRESENTATION_SOURCE_FIELDS = ("link", "format", "title", "description")


class QueryBuilder:
    def __init__(
        self,
        params: QueryParameters,
        schema: IndexSchema,
        format_boosts: JSONDict,
        best_bets: Sequence[Tuple[str, int]] = (),
        worst_bets: Sequence[str] = (),
        clock: Callable[[], float] = time.time,
        settings: Settings = default_settings,
    ):
        self.params = params
        self.schema = schema
        self.format_boosts = format_boosts
        self.best_bets = list(best_bets)
        self.worst_bets = list(worst_bets)
        self.clock = clock
        self.settings = settings

    def query(self) -> JSONDict:
        """필터/집계를 제외한 점수 계산용 쿼리."""
        q = core_query.core_query(self.params)
        q = booster.wrap(q, self.params, self.format_boosts, self.clock)
        q = popularity.wrap(q, self.params, self.settings.POPULARITY_OFFSET)
        if not self.params.debug.disable_best_bets:
            q = best_bets.wrap(q, self.best_bets, self.worst_bets)
        return q

    def filter(self) -> Optional[JSONDict]:
        return filters.combined_filter(self.params.filters)

    def source_fields(self) -> List[str]:
        known = self.schema.combined_field_definitions()
        fields = [f for f in self.params.return_fields if f in known and f not in COMPUTED_FIELDS]
        fields += [f for f in PRESENTATION_SOURCE_FIELDS if f in known]
        return list(dict.fromkeys(fields + ["document_type"]))

    def payload(self) -> JSONDict:
        body: JSONDict = {
            "from": self.params.start,
            "size": self.params.count,
            "track_total_hits": True,
            "query": self.query(),
            "_source": self.source_fields(),
        }
        post_filter = self.filter()
        if post_filter is not None:
            body["post_filter"] = post_filter
        aggs = aggregates.aggregates(self.params, self.settings.AGGREGATE_MAX_OPTIONS)
        if aggs:
            body["aggs"] = aggs
        hl = highlight.highlight(self.params)
        if hl is not None:
            body["highlight"] = hl
        order = sort.sort(self.params)
        if order is not None:
            body["sort"] = order
        return body
