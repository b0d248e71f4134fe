# search_api/tests/unit/adapters/indexers/test_opensearch_indexer.py

from typing import Any, Dict, List
from unittest.mock import MagicMock, patch
import pytest
from opensearchpy.exceptions import ConnectionError as OpenSearchConnectionError
from opensearchpy.exceptions import NotFoundError

from search_api.app.adapters.indexers.opensearch_indexer import OpenSearchIndexer, to_source
from search_api.app.platform.exceptions import BulkIndexFailure, EngineUnavailable, IndexLocked
"""
bulk_index: helpers.bulk 모킹으로 액션 형태(_id=link, document_type)와 성공/실패/잠금 분기 검증
get_document / delete: NotFoundError → None / False
delete_all / commit: delete_by_query, indices.refresh 호출 검증
"""

BULK = "search_api.app.adapters.indexers.opensearch_indexer.helpers.bulk"


# ----------------------
# 공용 픽스처
# ----------------------
@pytest.fixture
def mock_client():
    return MagicMock()


@pytest.fixture
def indexer(mock_client):
    return OpenSearchIndexer(mock_client, "mainstream")


def _consume(result):
    """helpers.bulk 대역: 액션 제너레이터를 소비해서 캡처한다."""
    captured: List[Dict[str, Any]] = []

    def fake_bulk(client, actions, **kwargs):
        captured.extend(actions)
        return result(captured) if callable(result) else result

    return fake_bulk, captured


def test_to_source_moves_type():
    assert to_source({"link": "/a", "_type": "best_bet"}) == {"link": "/a", "document_type": "best_bet"}
    assert to_source({"link": "/a"}) == {"link": "/a"}


def test_bulk_index_actions(indexer, mock_client):
    fake_bulk, captured = _consume(lambda actions: (len(actions), []))

    with patch(BULK, side_effect=fake_bulk) as bulk:
        count = indexer.bulk_index(iter([{"link": "/a", "title": "A", "_type": "edition"}]))

    assert count == 1
    assert captured == [{
        "_op_type": "index",
        "_index": "mainstream",
        "_id": "/a",
        "_source": {"link": "/a", "title": "A", "document_type": "edition"},
    }]
    assert bulk.call_args.kwargs["raise_on_error"] is False


def test_bulk_index_failures(indexer):
    errors = [{"index": {"_id": "/b", "error": {"type": "mapper_parsing_exception"}}}]
    with patch(BULK, return_value=(1, errors)):
        with pytest.raises(BulkIndexFailure) as ei:
            indexer.bulk_index([{"link": "/a"}, {"link": "/b"}])
    assert ei.value.failed_keys == ["/b"]


def test_bulk_index_locked(indexer):
    errors = [{"index": {"_id": "/a", "error": {"type": "cluster_block_exception"}}}]
    with patch(BULK, return_value=(0, errors)):
        with pytest.raises(IndexLocked):
            indexer.bulk_index([{"link": "/a"}])


def test_bulk_index_connection_failure(indexer):
    with patch(BULK, side_effect=OpenSearchConnectionError("N/A", "refused", Exception())):
        with pytest.raises(EngineUnavailable):
            indexer.bulk_index([{"link": "/a"}])


def test_get_document(indexer, mock_client):
    mock_client.get.return_value = {"_id": "/a", "_source": {"link": "/a", "title": "A"}}
    assert indexer.get_document("/a") == {"link": "/a", "title": "A"}
    mock_client.get.assert_called_once_with(index="mainstream", id="/a")

    mock_client.get.side_effect = NotFoundError(404, "not_found", {})
    assert indexer.get_document("/missing") is None


def test_delete(indexer, mock_client):
    assert indexer.delete("/a") is True
    mock_client.delete.assert_called_once_with(index="mainstream", id="/a")

    mock_client.delete.side_effect = NotFoundError(404, "not_found", {})
    assert indexer.delete("/missing") is False


def test_delete_all_and_commit(indexer, mock_client):
    mock_client.delete_by_query.return_value = {"deleted": 12}

    assert indexer.delete_all() == 12
    mock_client.delete_by_query.assert_called_once_with(
        index="mainstream", body={"query": {"match_all": {}}}
    )

    indexer.commit()
    mock_client.indices.refresh.assert_called_once_with(index="mainstream")
