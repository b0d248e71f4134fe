from unittest.mock import patch

from search_api.app.domain.services.opensearch_client import create_client
from search_api.app.platform.config import Settings

OPENSEARCH = "search_api.app.domain.services.opensearch_client.OpenSearch"


def test_client_uses_separate_timeouts_without_retries():
    # given: 연결/읽기 타임아웃을 서로 다르게 설정
    settings = Settings(
        OPENSEARCH_HOST="https://user:pw@search.internal:9443",
        OPENSEARCH_CONNECT_TIMEOUT=2.0,
        OPENSEARCH_READ_TIMEOUT=7.5,
    )

    # when
    with patch(OPENSEARCH) as mock_cls:
        client = create_client(settings)

    # then
    assert client is mock_cls.return_value
    kwargs = mock_cls.call_args.kwargs
    assert kwargs["timeout"] == (2.0, 7.5)
    assert kwargs["max_retries"] == 0
    assert kwargs["retry_on_timeout"] is False
    assert kwargs["hosts"] == [{"host": "search.internal", "port": 9443}]
    assert kwargs["http_auth"] == ("user", "pw")
    assert kwargs["use_ssl"] is True


def test_client_without_credentials_defaults_port():
    settings = Settings(OPENSEARCH_HOST="http://opensearch")

    with patch(OPENSEARCH) as mock_cls:
        create_client(settings)

    kwargs = mock_cls.call_args.kwargs
    assert kwargs["hosts"] == [{"host": "opensearch", "port": 9200}]
    assert kwargs["http_auth"] is None
    assert kwargs["use_ssl"] is False
