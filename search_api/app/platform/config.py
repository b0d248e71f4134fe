from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings
from dotenv import load_dotenv
import os

load_dotenv()

# search_api/resources
RESOURCES_DIR = Path(__file__).resolve().parents[2] / "resources"


class Settings(BaseSettings):
    APP_NAME: str = "site-search-api"
    DEBUG: bool = False
    API_KEY: Optional[str] = None

    # ---- OpenSearch ----
    OPENSEARCH_HOST: str = os.getenv('OPENSEARCH_HOST', 'http://opensearch:9200')
    # 콘텐츠 인덱스(alias) 목록. 콤마로 구분
    OPENSEARCH_CONTENT_INDICES: str = os.getenv('OPENSEARCH_CONTENT_INDICES', 'mainstream,detailed,government')
    OPENSEARCH_METASEARCH_INDEX: str = os.getenv('OPENSEARCH_METASEARCH_INDEX', 'metasearch')
    OPENSEARCH_SPELLING_INDEX: str = os.getenv('OPENSEARCH_SPELLING_INDEX', 'mainstream')
    OPENSEARCH_REGISTRY_INDEX: str = os.getenv('OPENSEARCH_REGISTRY_INDEX', 'government')
    OPENSEARCH_CONNECT_TIMEOUT: float = 5.0
    OPENSEARCH_READ_TIMEOUT: float = 5.0

    # ---- 검색 파라미터 한도 ----
    SEARCH_DEFAULT_COUNT: int = 10
    SEARCH_MAX_COUNT: int = 1000
    SEARCH_MAX_START: int = 10000
    AGGREGATE_MAX_OPTIONS: int = 100
    AGGREGATE_MAX_EXAMPLES: int = 10
    POPULARITY_OFFSET: float = 0.001

    # ---- 레지스트리 캐시 ----
    REGISTRY_CACHE_TTL_SECONDS: int = 12 * 3600

    # ---- 리소스 파일 ----
    SCHEMA_PATH: str = str(RESOURCES_DIR / "schema" / "index_schema.json")
    FORMAT_BOOST_PATH: str = str(RESOURCES_DIR / "config" / "format_boosting.json")
    SUGGEST_IGNORE_PATH: str = str(RESOURCES_DIR / "config" / "suggest_ignore.json")
    PROMOTED_RESULTS_PATH: str = str(RESOURCES_DIR / "config" / "promoted_results.json")

    # ---- 로깅 ----
    LOG_LEVEL: str = "INFO"
    LOG_AS_JSON: bool = True
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "/var/log/app"

    @property
    def content_index_names(self) -> List[str]:
        return [n.strip() for n in self.OPENSEARCH_CONTENT_INDICES.split(",") if n.strip()]

    @property
    def index_names(self) -> List[str]:
        """문서 변경 API가 허용하는 인덱스 이름 전체."""
        names = self.content_index_names + [self.OPENSEARCH_METASEARCH_INDEX]
        return list(dict.fromkeys(names))


settings = Settings()
