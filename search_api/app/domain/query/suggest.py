"""
맞춤법 제안(term suggester).

엔진은 콘텐츠에 드문 단어를 오타로 보고 제안을 만든다. 숫자가 들어간 검색어나
도메인 용어(기관 약어 등)는 교정하지 않는다.
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Iterable, Optional

from search_api.app.domain.query.parameters import QueryParameters

SUGGESTION_NAME = "spelling_suggestions"
SPELLING_FIELD = "spelling_text"

_DIGIT = re.compile(r"\d")


def suggest(params: QueryParameters) -> dict[str, Any]:
    return {
        SUGGESTION_NAME: {
            "text": params.query,
            "term": {"field": SPELLING_FIELD, "sort": "score"},
        }
    }


def load_suggest_ignore(path: str) -> list[str]:
    with open(path, "r", encoding="utf-8") as f:
        return list(json.load(f))


class SuggestionBlacklist:
    """
    Args:
        ignore_terms: 교정하지 않을 고정 용어 목록
        extra_terms: 호출 시점의 추가 용어(예: 레지스트리의 기관 약어)를 돌려주는 함수
    """

    def __init__(self, ignore_terms: Iterable[str],
                 extra_terms: Optional[Callable[[], Iterable[str]]] = None):
        self._ignore = {t.lower() for t in ignore_terms}
        self._extra_terms = extra_terms

    def ignore_list(self) -> set[str]:
        terms = set(self._ignore)
        if self._extra_terms is not None:
            terms.update(t.lower() for t in self._extra_terms() if t)
        return terms

    def should_correct(self, query: Optional[str]) -> bool:
        if not query:
            return False
        if _DIGIT.search(query):
            return False
        return query.strip().lower() not in self.ignore_list()
