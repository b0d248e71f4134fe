import sys
from pathlib import Path

# 프로젝트 루트 경로를 sys.path에 추가 (…/<project-root>)
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient
from search_api.app.main import app
from search_api.app.domain.models import IndexSchema, load_index_schema
from search_api.app.domain.query.parameters import QueryParameters
from search_api.app.platform.config import Settings, settings as app_settings


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


@pytest.fixture(scope="session")
def schema() -> IndexSchema:
    """리소스의 실제 인덱스 스키마"""
    return load_index_schema(app_settings.SCHEMA_PATH)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        SEARCH_DEFAULT_COUNT=10,
        SEARCH_MAX_COUNT=100,
        SEARCH_MAX_START=500,
        AGGREGATE_MAX_OPTIONS=50,
        AGGREGATE_MAX_EXAMPLES=5,
    )


@pytest.fixture
def make_params():
    """QueryParameters 생성 헬퍼"""
    def _make(**kwargs) -> QueryParameters:
        return QueryParameters(**kwargs)
    return _make
