from fastapi.testclient import TestClient
from unittest.mock import MagicMock
import pytest

from search_api.app.main import app
from search_api.app.api.deps import get_format_boosts, get_schema, get_search_service
from search_api.app.domain.query.suggest import SuggestionBlacklist
from search_api.app.domain.services.search_service import SearchService
from search_api.app.platform.exceptions import EngineUnavailable


@pytest.fixture
def client():
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def mock_searcher():
    searcher = MagicMock()
    # 기본 리턴 형태를 OpenSearch 응답과 같은 형태로 세팅
    searcher.raw_search.return_value = {
        "took": 4,
        "hits": {
            "total": {"value": 2, "relation": "eq"},
            "hits": [{
                "_index": "mainstream-2024-01-01-1",
                "_id": "/cheese-making",
                "_score": 12.3,
                "_source": {"link": "/cheese-making", "title": "Cheese & making",
                            "format": "guide", "document_type": "edition"},
            }],
        },
    }
    return searcher


@pytest.fixture(autouse=True)
def override_dependency(mock_searcher):
    svc = SearchService(
        mock_searcher,
        get_schema(),
        {},
        get_format_boosts(),
        SuggestionBlacklist([]),
        best_bets_checker=None,
    )
    app.dependency_overrides[get_search_service] = lambda: svc
    yield
    app.dependency_overrides.clear()


def test_search_returns_results(client, mock_searcher):
    """
    count=1, 일치 문서 2건 → 결과 1건, total 2
    """
    resp = client.get("/api/search", params={"q": "cheese", "count": "1", "fields": "link,title"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"].startswith("검색 성공")
    data = body["data"]
    assert data["total"] == 2
    assert data["start"] == 0
    assert data["results"][0]["title"] == "Cheese & making"
    assert data["results"][0]["index"] == "mainstream"
    assert "search_query" not in data
    assert mock_searcher.raw_search.call_args.args[0]["size"] == 1


def test_search_highlighting_escapes_title(client):
    resp = client.get("/api/search", params={"q": "cheese", "fields": "title_with_highlighting"})
    assert resp.status_code == 200
    assert resp.json()["data"]["results"][0]["title_with_highlighting"] == "Cheese &amp; making"


def test_search_repeated_filter_params(client, mock_searcher):
    """
    같은 이름의 파라미터를 여러 번 주면 값 목록으로 합쳐진다
    """
    resp = client.get("/api/search?q=tax&filter_organisations=hmrc&filter_organisations=dvla")
    assert resp.status_code == 200
    payload = mock_searcher.raw_search.call_args.args[0]
    assert payload["post_filter"] == {"bool": {"filter": [{"terms": {"organisations": ["hmrc", "dvla"]}}]}}


def test_search_show_query(client, mock_searcher):
    resp = client.get("/api/search", params={"q": "cheese", "debug": "show_query"})
    assert resp.status_code == 200
    assert resp.json()["data"]["search_query"]["from"] == 0


def test_search_invalid_parameters_returns_422(client, mock_searcher):
    """
    잘못된 파라미터는 모든 오류를 모아 422로 내려준다
    """
    resp = client.get("/api/search", params={"count": "lots", "filter_fish": "trout"})

    assert resp.status_code == 422
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "INVALID_QUERY"
    assert len(body["error"]["details"]) == 2
    mock_searcher.raw_search.assert_not_called()


def test_search_engine_unavailable_returns_503(client, mock_searcher):
    """
    검색 엔진 연결 실패는 503
    """
    mock_searcher.raw_search.side_effect = EngineUnavailable("opensearch down")

    resp = client.get("/api/search", params={"q": "cheese"})
    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "ENGINE_UNAVAILABLE"


def test_search_unexpected_error_returns_500(client, mock_searcher):
    """
    서비스에서 임의 예외가 발생하면 500이 내려오는지 확인
    """
    mock_searcher.raw_search.side_effect = RuntimeError("boom")

    resp = client.get("/api/search", params={"q": "cheese"})
    assert resp.status_code == 500
