# app/domain/services/search_service.py
"""
SearchService
==============

검색 유스케이스 오케스트레이터.

Flow:
    파라미터 파싱 → 베스트 벳 조회 → 쿼리 조립 → raw_search
    → 집계 예시 multi_search → (맞춤법 제안) → 결과 표시

- 도메인은 **Port(인터페이스)** 에만 의존합니다. (DIP)
- 구현체는 adapters 레이어에서 주입(의존성 주입; DI)합니다.

예시:
    svc = SearchService(searcher, schema, registries, format_boosts, blacklist, checker)
    result = svc.search(svc.parse({"q": ["cheese"], "count": ["1"]}))
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from search_api.app.domain.models import IndexSchema
from search_api.app.domain.ports import SearchPort
from search_api.app.domain.presenters.result_set import ResultSetPresenter
from search_api.app.domain.query.aggregate_examples import AggregateExampleFetcher, hits_total
from search_api.app.domain.query.best_bets import BestBetsChecker
from search_api.app.domain.query.builder import QueryBuilder
from search_api.app.domain.query.parameter_parser import SearchParameterParser
from search_api.app.domain.query.parameters import QueryParameters
from search_api.app.domain.query.suggest import SuggestionBlacklist, suggest
from search_api.app.platform.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class SearchService:

    def __init__(
        self,
        searcher: SearchPort,
        schema: IndexSchema,
        registries: Optional[Mapping[str, Any]],
        format_boosts: Dict[str, Any],
        suggestion_blacklist: SuggestionBlacklist,
        best_bets_checker: Optional[BestBetsChecker] = None,
        settings: Settings = default_settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        검색 서비스 초기화.
        Args:
            searcher: SearchPort                   : 검색 엔진 조회
            schema: IndexSchema                    : 인덱스 스키마
            registries: Mapping                    : 결과 필드 → 레지스트리
            format_boosts: dict                    : 포맷 부스트 설정
            suggestion_blacklist: SuggestionBlacklist : 맞춤법 교정 제외 목록
            best_bets_checker: BestBetsChecker     : 베스트 벳 조회(없으면 사용 안 함)
            settings: Settings                     : 설정
            clock: Callable                        : 현재 시각(epoch 초)
        """
        self._searcher = searcher
        self._schema = schema
        self._registries = registries
        self._format_boosts = format_boosts
        self._blacklist = suggestion_blacklist
        self._best_bets_checker = best_bets_checker
        self._settings = settings
        self._clock = clock

    # ================= public API =================
    def parse(self, raw_params: Mapping[str, Sequence[str]]) -> QueryParameters:
        return SearchParameterParser(raw_params, self._schema, self._settings).parse()

    def search(self, params: QueryParameters) -> Dict[str, Any]:
        """
        검색을 수행하는 메서드.
        Args:
            params: QueryParameters : 검증된 검색 파라미터
        Returns:
            Dict[str, Any]: 표시용 검색 결과(results, total, start, aggregates, suggested_queries)
        """
        logger.info("service.search: query=%s start=%s count=%s",
                    params.query, params.start, params.count, extra={"query": params.query})

        best_bets, worst_bets = self._bets(params)
        builder = QueryBuilder(
            params,
            self._schema,
            self._format_boosts,
            best_bets=best_bets,
            worst_bets=worst_bets,
            clock=self._clock,
            settings=self._settings,
        )
        payload = builder.payload()
        response = self._searcher.raw_search(payload)

        aggregate_examples = AggregateExampleFetcher(self._searcher, response, builder).fetch()

        if params.suggest_spelling:
            response["suggest"] = self._spell_check(params)

        logger.info("service.search: query=%s total=%s",
                    params.query, hits_total(response.get("hits") or {}),
                    extra={"query": params.query, "total": hits_total(response.get("hits") or {})})
        return ResultSetPresenter(
            params,
            response,
            self._schema,
            registries=self._registries,
            aggregate_examples=aggregate_examples,
            query_payload=payload,
        ).present()

    # ================= internal helpers =================
    def _bets(self, params: QueryParameters):
        if params.debug.disable_best_bets or self._best_bets_checker is None:
            return [], []
        if not params.has_query or params.similar_to:
            return [], []
        return self._best_bets_checker.bets(params.query)

    def _spell_check(self, params: QueryParameters) -> Optional[Dict[str, Any]]:
        """
        맞춤법 제안은 지정한 철자 인덱스에만 따로 요청한다.
        모든 인덱스를 대상으로 하면 일부 인덱스에만 있는 단어가 오타로 제안되기 때문.
        """
        if not self._blacklist.should_correct(params.query):
            return None
        response = self._searcher.raw_search(
            {"size": 0, "suggest": suggest(params)},
            index=self._settings.OPENSEARCH_SPELLING_INDEX,
        )
        return response.get("suggest")
