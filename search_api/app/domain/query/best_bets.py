"""
베스트 벳 / 워스트 벳.

metasearch 인덱스의 best_bet 문서:
    exact_query 또는 stemmed_query,
    details = '{"best_bets": [{"link", "position"}], "worst_bets": [{"link"}]}',
    stemmed_query_as_term = 분석기로 어간 추출한 토큰을 공백으로 이은 값(앞뒤 공백 포함)

정확 일치 벳이 있으면 어간 일치 벳보다 우선한다.
어간 일치는 검색어 토큰 안에서 같은 순서로 연속해서 나타나야 한다.
"""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from typing import Any, Iterable, List, Optional, Tuple

from search_api.app.domain.ports import SearchPort

log = logging.getLogger(__name__)

JSONDict = dict[str, Any]

BEST_BET_TYPE = "best_bet"
STEMMED_ANALYZER = "best_bet_stemmed_match"
MAX_BETS = 1000
BEST_BET_BOOST = 1_000_000


def as_term(tokens: Iterable[str]) -> str:
    # 부분 문자열 검사에서 단어 경계를 맞추기 위해 앞뒤에 공백을 둔다
    return " " + " ".join(tokens) + " "


def stemmed_query_as_term(searcher: SearchPort, text: str, analyzer: str = STEMMED_ANALYZER,
                          index: Optional[str] = None) -> str:
    return as_term(searcher.analyze(text, analyzer, index))


class BestBetsChecker:
    """
    사용 예:
        checker = BestBetsChecker(searcher, "metasearch")
        best, worst = checker.bets("pie")
    """

    def __init__(self, searcher: SearchPort, index: str, analyzer: str = STEMMED_ANALYZER):
        self._searcher = searcher
        self._index = index
        self._analyzer = analyzer

    def _lookup_payload(self, query: str, analyzed: str) -> JSONDict:
        return {
            "size": MAX_BETS,
            "_source": ["exact_query", "stemmed_query_as_term", "details"],
            "query": {
                "bool": {
                    "filter": [{"term": {"document_type": BEST_BET_TYPE}}],
                    "should": [
                        {"term": {"exact_query": query.lower()}},
                        {"match": {"stemmed_query_as_term": analyzed.strip()}},
                    ],
                    "minimum_should_match": 1,
                }
            },
        }

    def bets(self, query: Optional[str]) -> Tuple[List[Tuple[str, int]], List[str]]:
        """
        Returns:
            (best_bets, worst_bets): [(link, position), ...], [link, ...]
        """
        if not query or not query.strip():
            return [], []
        query = query.strip()
        analyzed = as_term(self._searcher.analyze(query, self._analyzer, self._index))
        response = self._searcher.raw_search(self._lookup_payload(query, analyzed), index=self._index)

        exact, stemmed = [], []
        for hit in response.get("hits", {}).get("hits", []):
            source = hit.get("_source") or {}
            details = self._details(source.get("details"))
            if details is None:
                continue
            exact_query = source.get("exact_query")
            if exact_query is not None:
                if exact_query.lower() == query.lower():
                    exact.append(details)
                continue
            term = source.get("stemmed_query_as_term")
            if term and term in analyzed:
                stemmed.append(details)

        chosen = exact or stemmed
        log.debug("best_bets: query=%s exact=%d stemmed=%d", query, len(exact), len(stemmed))
        return self._combine(chosen)

    @staticmethod
    def _details(raw: Any) -> Optional[JSONDict]:
        if isinstance(raw, dict):
            return raw
        try:
            return json.loads(raw) if raw else None
        except (TypeError, ValueError):
            log.warning("best_bets: unparseable details=%r", raw)
            return None

    @staticmethod
    def _combine(details_list: List[JSONDict]) -> Tuple[List[Tuple[str, int]], List[str]]:
        best: "OrderedDict[str, int]" = OrderedDict()
        worst: "OrderedDict[str, None]" = OrderedDict()
        for details in details_list:
            for bet in details.get("best_bets", []):
                link, position = bet.get("link"), max(1, int(bet.get("position", 1)))
                if link and (link not in best or position < best[link]):
                    best[link] = position
            for bet in details.get("worst_bets", []):
                if bet.get("link"):
                    worst[bet["link"]] = None
        ranked = sorted(best.items(), key=lambda item: item[1])
        return ranked, [link for link in worst if link not in best]


def wrap(query: JSONDict, best_bets: List[Tuple[str, int]], worst_bets: List[str]) -> JSONDict:
    """
    베스트 벳은 위치별 constant_score(1,000,000 / position)로 최상단에 고정하고,
    워스트 벳은 must_not으로 결과에서 제외한다.
    """
    if not best_bets and not worst_bets:
        return query

    by_position: "OrderedDict[int, list[str]]" = OrderedDict()
    for link, position in sorted(best_bets, key=lambda item: item[1]):
        by_position.setdefault(position, []).append(link)

    should = [query] + [
        {
            "constant_score": {
                "filter": {"terms": {"link": links}},
                "boost": BEST_BET_BOOST / position,
            }
        }
        for position, links in by_position.items()
    ]
    wrapped: JSONDict = {"bool": {"should": should}}
    if worst_bets:
        wrapped["bool"]["must_not"] = [{"terms": {"link": list(worst_bets)}}]
    return wrapped
