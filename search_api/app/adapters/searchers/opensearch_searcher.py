"""
검색 엔진 조회용 SearchPort 구현체.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from opensearchpy import OpenSearch, helpers

from search_api.app.adapters.engine_errors import classify_engine_error, engine_errors, error_text
from search_api.app.domain.ports import SearchPort
from search_api.app.platform.exceptions import EngineUnavailable

log = logging.getLogger(__name__)


class OpenSearchSearcher(SearchPort):

    def __init__(self, client: OpenSearch, index_names: Sequence[str],
                 registry_index: Optional[str] = None) -> None:
        self.client = client
        self.index_names = list(index_names)
        self.registry_index = registry_index or (self.index_names[0] if self.index_names else None)

    def _target(self, index: Optional[str]) -> str:
        return index or ",".join(self.index_names)

    def raw_search(self, payload: Dict[str, Any], index: Optional[str] = None) -> Dict[str, Any]:
        """
        완성된 쿼리 본문으로 검색한다.

        Args:
            payload (dict): 쿼리 본문
            index (str): 대상 인덱스(없으면 콘텐츠 인덱스 전체)
        Returns:
            Dict[str, Any]: 엔진 응답(hits, aggregations, suggest, took ...)
        """
        target = self._target(index)
        with engine_errors(target):
            response = self.client.search(index=target, body=payload)
        log.info("searcher.raw_search: index=%s took=%s", target, response.get("took"),
                 extra={"index": target, "took_ms": response.get("took")})
        return response

    def multi_search(self, payloads: List[Dict[str, Any]],
                     index: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        여러 쿼리를 msearch 한 번으로 보낸다. 응답 순서는 요청 순서와 같다.
        항목별 오류는 도메인 예외로 바꿔 던진다.
        """
        if not payloads:
            return []
        target = self._target(index)
        body: List[Dict[str, Any]] = []
        for payload in payloads:
            body.append({})
            body.append(payload)
        with engine_errors(target):
            response = self.client.msearch(body=body, index=target)

        responses = response.get("responses", [])
        for item in responses:
            if "error" in item:
                status = item.get("status")
                text = error_text(item["error"])
                translated = classify_engine_error(text, status, target)
                if translated is None:
                    translated = EngineUnavailable(f"multi search item failed: {text[:500]}")
                raise translated
        return responses

    def analyze(self, text: str, analyzer: str, index: Optional[str] = None) -> List[str]:
        target = index or (self.index_names[0] if self.index_names else None)
        with engine_errors(target):
            response = self.client.indices.analyze(
                index=target, body={"analyzer": analyzer, "text": text}
            )
        return [token["token"] for token in response.get("tokens", [])]

    def documents_by_format(self, format: str, fields: List[str],
                            index: Optional[str] = None) -> Iterable[Dict[str, Any]]:
        """scroll로 해당 format 문서 전체를 순회한다."""
        target = index or self.registry_index
        query = {"query": {"term": {"format": format}}, "_source": list(fields)}
        with engine_errors(target):
            for hit in helpers.scan(self.client, index=target, query=query):
                yield hit.get("_source") or {}
