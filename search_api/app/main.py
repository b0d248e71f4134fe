from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from search_api.app.adapters.searchers.opensearch_searcher import OpenSearchSearcher
from search_api.app.api.routers import (
    health,
    search,
    documents,
)
from search_api.app.domain.registries import Registries
from search_api.app.domain.services.opensearch_client import create_client, close_client
from search_api.app.platform.config import settings
from search_api.app.platform.logging import setup_logging
from search_api.app.platform.errors import (
    http_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler,
    domain_exception_handler
)
from search_api.app.platform import exceptions as domainex
from search_api.app.middlewares.request_context import RequestContextMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 로깅 등 공통 준비
    setup_logging(
        log_to_file=settings.LOG_TO_FILE,
        log_dir=settings.LOG_DIR,
        as_json=settings.LOG_AS_JSON,
        level=settings.LOG_LEVEL,
    )

    # OpenSearch 클라이언트와 레지스트리 캐시를 한 번만 생성해서 공유
    app.state.opensearch = create_client(settings)
    app.state.registries = Registries(
        OpenSearchSearcher(
            app.state.opensearch,
            settings.content_index_names,
            settings.OPENSEARCH_REGISTRY_INDEX),
        index=settings.OPENSEARCH_REGISTRY_INDEX,
        ttl_seconds=settings.REGISTRY_CACHE_TTL_SECONDS,
    )
    logger.info("app.start: indices=%s", settings.content_index_names)
    try:
        yield
    finally:
        close_client(app.state.opensearch)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.include_router(health.router)
app.include_router(search.router, prefix="/api")
app.include_router(documents.router, prefix="/api")

# Global Exception Filter
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(domainex.DomainError, domain_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# 요청 컨텍스트/액세스 로그 미들웨어
app.add_middleware(RequestContextMiddleware)
