from urllib.parse import urlparse

from opensearchpy import OpenSearch, RequestsHttpConnection

from search_api.app.platform.config import Settings, settings as default_settings


def create_client(settings: Settings = default_settings) -> OpenSearch:
    """
    OpenSearch 클라이언트 생성.
    연결/읽기 타임아웃을 (connect, read) 튜플로 따로 주고, 자동 재시도는 하지 않는다.
    """
    u = urlparse(settings.OPENSEARCH_HOST)
    http_auth = (u.username, u.password or "") if u.username else None
    return OpenSearch(
        hosts=[{"host": u.hostname, "port": u.port or 9200}],
        http_auth=http_auth,
        use_ssl=u.scheme == "https",
        verify_certs=False,
        connection_class=RequestsHttpConnection,
        timeout=(settings.OPENSEARCH_CONNECT_TIMEOUT, settings.OPENSEARCH_READ_TIMEOUT),
        max_retries=0,
        retry_on_timeout=False,
    )


def close_client(client: OpenSearch) -> None:
    client.transport.close()
