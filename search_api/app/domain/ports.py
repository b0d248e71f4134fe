"""
도메인 포트(추상 인터페이스).

애플리케이션 서비스(유스케이스)는 아래 포트들(추상)에만 의존합니다.
구체 구현은 adapters 레이어(OpenSearch)에서 제공하고, FastAPI DI로 주입합니다.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Protocol

JSONDict = dict[str, Any]


class SearchPort(Protocol):
    """
    검색 엔진 조회 포트.
    엔진 오류는 구현체에서 도메인 예외(InvalidQuery, EngineUnavailable 등)로 변환한다.
    """

    def raw_search(self, payload: JSONDict, index: Optional[str] = None) -> JSONDict:
        """
        Args:
            payload: 완성된 쿼리 본문(query/from/size/aggs/...)
            index: 대상 인덱스(없으면 기본 콘텐츠 인덱스 전체)
        Returns:
            JSONDict: 엔진 응답 원본
        """
        ...

    def multi_search(self, payloads: List[JSONDict], index: Optional[str] = None) -> List[JSONDict]:
        """독립적인 여러 쿼리를 한 번의 msearch로 보낸다. 순서가 보존된다."""
        ...

    def analyze(self, text: str, analyzer: str, index: Optional[str] = None) -> List[str]:
        """엔진 분석기로 text를 토큰화한 결과."""
        ...

    def documents_by_format(self, format: str, fields: List[str],
                            index: Optional[str] = None) -> Iterable[JSONDict]:
        """해당 format 문서 전체를 fields만 담아 순회한다(레지스트리 적재용)."""
        ...


class DocumentStorePort(Protocol):
    """
    단일 인덱스에 대한 문서 변경 포트.
    """

    def bulk_index(self, documents: Iterable[JSONDict]) -> int:
        """
        Args:
            documents: export_for_index() 결과 목록
        Returns:
            int: 적재된 문서 수
        """
        ...

    def get_document(self, link: str) -> Optional[JSONDict]:
        """link로 문서를 조회한다. 없으면 None."""
        ...

    def delete(self, link: str) -> bool:
        ...

    def delete_all(self) -> int:
        ...

    def commit(self) -> None:
        """refresh: 변경 사항을 검색 가능하게 만든다."""
        ...
