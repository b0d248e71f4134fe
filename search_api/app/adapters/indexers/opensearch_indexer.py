"""
단일 인덱스 문서 변경용 DocumentStorePort 구현체.

문서 _id는 link. 문서 타입은 _source의 document_type 필드에 둔다
(_type은 엔진 메타데이터 필드라 _source에 넣을 수 없음).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from opensearchpy import OpenSearch, helpers
from opensearchpy.exceptions import NotFoundError

from search_api.app.adapters.engine_errors import engine_errors
from search_api.app.domain.ports import DocumentStorePort
from search_api.app.platform.exceptions import BulkIndexFailure, IndexLocked

log = logging.getLogger(__name__)

INDEX_LOCKED_ERROR = "cluster_block_exception"


def to_source(document: Dict[str, Any]) -> Dict[str, Any]:
    source = dict(document)
    doc_type = source.pop("_type", None)
    if doc_type:
        source["document_type"] = doc_type
    return source


class OpenSearchIndexer(DocumentStorePort):

    def __init__(self, client: OpenSearch, index_name: str) -> None:
        self.client = client
        self.index_name = index_name

    def bulk_index(self, documents: Iterable[Dict[str, Any]]) -> int:
        """
            문서들을 bulk로 적재한다.

            Args:
                documents: export_for_index() 결과 목록(link 필수)
            Returns:
                적재된 문서 수
            Raises:
                IndexLocked: 인덱스가 쓰기 잠금 상태
                BulkIndexFailure: 일부 문서 적재 실패
        """
        def actions():
            for doc in documents:
                yield {
                    "_op_type": "index",
                    "_index": self.index_name,
                    "_id": doc["link"],
                    "_source": to_source(doc),
                }

        with engine_errors(self.index_name):
            ok, errors = helpers.bulk(self.client, actions(), raise_on_error=False)

        if errors:
            failed: List[str] = []
            locked = False
            for e in errors:
                item = next(iter(e.values()), {}) if isinstance(e, dict) else {}
                failed.append(str(item.get("_id", "")))
                locked = locked or INDEX_LOCKED_ERROR in str(item.get("error", ""))
            if locked:
                raise IndexLocked(self.index_name)
            log.error("indexer.bulk_index: index=%s failed=%s", self.index_name, failed)
            raise BulkIndexFailure(self.index_name, failed)

        log.info("indexer.bulk_index: index=%s indexed=%d", self.index_name, ok,
                 extra={"index": self.index_name, "doc_count": ok})
        return ok

    def get_document(self, link: str) -> Optional[Dict[str, Any]]:
        with engine_errors(self.index_name):
            try:
                response = self.client.get(index=self.index_name, id=link)
            except NotFoundError:
                return None
        return response.get("_source")

    def delete(self, link: str) -> bool:
        with engine_errors(self.index_name):
            try:
                self.client.delete(index=self.index_name, id=link)
            except NotFoundError:
                return False
        log.info("indexer.delete: index=%s link=%s", self.index_name, link)
        return True

    def delete_all(self) -> int:
        with engine_errors(self.index_name):
            response = self.client.delete_by_query(
                index=self.index_name, body={"query": {"match_all": {}}}
            )
        deleted = int(response.get("deleted", 0))
        log.info("indexer.delete_all: index=%s deleted=%d", self.index_name, deleted)
        return deleted

    def commit(self) -> None:
        with engine_errors(self.index_name):
            self.client.indices.refresh(index=self.index_name)
