from __future__ import annotations

from typing import Any, Optional

from search_api.app.domain.query.suggest import SUGGESTION_NAME


class SpellCheckPresenter:
    """
    term suggester 응답 → 제안 목록.
    단어마다 가장 점수가 높은 후보 하나를 고르고, 점수 내림차순으로 정렬한다.
    """

    def __init__(self, suggest: Optional[dict[str, Any]]):
        self._suggest = suggest or {}

    def present(self) -> list[str]:
        best = []
        for entry in self._suggest.get(SUGGESTION_NAME) or []:
            options = entry.get("options") or []
            if not options:
                continue
            top = max(options, key=lambda o: o.get("score", 0))
            best.append(top)
        best.sort(key=lambda o: o.get("score", 0), reverse=True)
        return [o["text"] for o in best]
