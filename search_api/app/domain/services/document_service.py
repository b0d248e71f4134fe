"""
DocumentService
================

인덱스 1개에 대한 문서 추가/조회/수정/삭제 유스케이스.

- 입력은 스키마로 정규화한 Document를 거쳐 export_for_index() 형태로 저장한다.
- edition 문서는 ResultPromoter로 promoted_for를 갱신한다.
- best_bet 문서는 stemmed_query를 엔진 분석기로 분석해 stemmed_query_as_term을 채운다.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from search_api.app.domain.document import Document, ResultPromoter
from search_api.app.domain.models import IndexSchema
from search_api.app.domain.ports import DocumentStorePort, SearchPort
from search_api.app.domain.query.best_bets import BEST_BET_TYPE, stemmed_query_as_term
from search_api.app.platform.exceptions import DocumentNotFound, InvalidInput

logger = logging.getLogger(__name__)


class DocumentService:

    def __init__(
        self,
        store: DocumentStorePort,
        schema: IndexSchema,
        index_name: str,
        searcher: Optional[SearchPort] = None,
        promoter: Optional[ResultPromoter] = None,
    ) -> None:
        """
        Args:
            store: DocumentStorePort : 대상 인덱스 저장소
            schema: IndexSchema      : 인덱스 스키마
            index_name: str          : 인덱스 이름(로그/분석기 대상)
            searcher: SearchPort     : best_bet 어간 분석용(없으면 분석 생략)
            promoter: ResultPromoter : 프로모션 적용기
        """
        self._store = store
        self._schema = schema
        self._index_name = index_name
        self._searcher = searcher
        self._promoter = promoter

    # ================= public API =================
    def add(self, payload: Union[Mapping[str, Any], List[Mapping[str, Any]]]) -> int:
        """
        문서(1건 또는 목록)를 적재한다.
        Returns:
            int: 적재된 문서 수
        """
        items = payload if isinstance(payload, list) else [payload]
        if not items:
            raise InvalidInput("No documents supplied")
        documents = [self._from_payload(item) for item in items]
        logger.info("service.add: index=%s count=%d", self._index_name, len(documents),
                    extra={"index": self._index_name, "doc_count": len(documents)})
        return self._store.bulk_index(self._export(d) for d in documents)

    def get(self, link: str) -> Dict[str, Any]:
        return self._load(link).to_wire()

    def amend(self, link: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
        """
        지정 필드만 덮어쓴다. 알 수 없는 필드나 link 수정 요청이면
        아무것도 바꾸지 않고 예외를 던진다.
        """
        document = self._load(link)
        document.update(updates)
        logger.info("service.amend: index=%s link=%s fields=%s",
                    self._index_name, link, sorted(updates))
        self._store.bulk_index([self._export(document)])
        return document.to_wire()

    def delete(self, link: str) -> None:
        if not self._store.delete(link):
            raise DocumentNotFound(link)

    def delete_all(self) -> int:
        logger.warning("service.delete_all: index=%s", self._index_name)
        return self._store.delete_all()

    def commit(self) -> None:
        self._store.commit()

    # ================= internal helpers =================
    def _from_payload(self, item: Mapping[str, Any]) -> Document:
        if not isinstance(item, Mapping):
            raise InvalidInput("Each document must be a JSON object")
        document = Document.from_wire(item, self._schema)
        if not document.link:
            raise InvalidInput(f"Document must have a '{self._schema.identity_field}'")
        return document

    def _load(self, link: str) -> Document:
        source = self._store.get_document(link)
        if source is None:
            raise DocumentNotFound(link)
        return Document.from_wire(source, self._schema)

    def _export(self, document: Document) -> Dict[str, Any]:
        exported = document.export_for_index()
        if document.doc_type == BEST_BET_TYPE:
            return self._with_stemmed_term(exported)
        if self._promoter is not None:
            exported = self._promoter.with_promotion(exported)
        return exported

    def _with_stemmed_term(self, exported: Dict[str, Any]) -> Dict[str, Any]:
        stemmed = exported.get("stemmed_query")
        if stemmed and self._searcher is not None:
            exported["stemmed_query_as_term"] = stemmed_query_as_term(
                self._searcher, stemmed, index=self._index_name
            )
        return exported