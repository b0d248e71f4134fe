from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict

from fastapi import Depends, Request
from opensearchpy import OpenSearch

from search_api.app.adapters.indexers.opensearch_indexer import OpenSearchIndexer
from search_api.app.adapters.searchers.opensearch_searcher import OpenSearchSearcher
from search_api.app.domain.document import ResultPromoter
from search_api.app.domain.models import IndexSchema, load_index_schema, load_promoted_results
from search_api.app.domain.ports import SearchPort
from search_api.app.domain.query.best_bets import BestBetsChecker
from search_api.app.domain.query.booster import load_format_boosts
from search_api.app.domain.query.suggest import SuggestionBlacklist, load_suggest_ignore
from search_api.app.domain.registries import Registries
from search_api.app.domain.services.document_service import DocumentService
from search_api.app.domain.services.opensearch_client import create_client
from search_api.app.domain.services.search_service import SearchService
from search_api.app.platform.config import settings
from search_api.app.platform.exceptions import NoSuchIndex


# ---- 리소스(프로세스 단위로 한 번만 읽음) ----
@lru_cache(maxsize=1)
def get_schema() -> IndexSchema:
    return load_index_schema(settings.SCHEMA_PATH)


@lru_cache(maxsize=1)
def get_format_boosts() -> Dict[str, Any]:
    return load_format_boosts(settings.FORMAT_BOOST_PATH)


@lru_cache(maxsize=1)
def get_suggest_ignore() -> tuple:
    return tuple(load_suggest_ignore(settings.SUGGEST_IGNORE_PATH))


@lru_cache(maxsize=1)
def get_promoter() -> ResultPromoter:
    return ResultPromoter(load_promoted_results(settings.PROMOTED_RESULTS_PATH))


# ---- 클라이언트 ----
def get_opensearch(request: Request) -> OpenSearch:
    """
    앱 시작 시 main.py의 lifespan에서 만들어 넣어둔 OpenSearch 클라이언트를 꺼낸다.
    없으면(테스트 등) 즉석 생성.
    """
    if hasattr(request.app.state, "opensearch"):
        return request.app.state.opensearch
    return create_client(settings)


def get_searcher(os: OpenSearch = Depends(get_opensearch)) -> SearchPort:
    return OpenSearchSearcher(os, settings.content_index_names, settings.OPENSEARCH_REGISTRY_INDEX)


def get_registries(request: Request, searcher: SearchPort = Depends(get_searcher)) -> Registries:
    """
    레지스트리 캐시는 앱 전체에서 하나를 공유한다(lifespan에서 생성).
    없으면 만들어서 app.state에 넣어 둔다.
    """
    registries = getattr(request.app.state, "registries", None)
    if registries is None:
        registries = Registries(
            searcher,
            index=settings.OPENSEARCH_REGISTRY_INDEX,
            ttl_seconds=settings.REGISTRY_CACHE_TTL_SECONDS,
        )
        request.app.state.registries = registries
    return registries


# ---- 서비스 ----
def get_search_service(
    searcher: SearchPort = Depends(get_searcher),
    registries: Registries = Depends(get_registries),
) -> SearchService:
    """
    FastAPI DI에서 검색 포트와 레지스트리를 받아 SearchService를 생성해 주입한다.
    """
    blacklist = SuggestionBlacklist(get_suggest_ignore(), registries.organisation_acronyms)
    checker = BestBetsChecker(searcher, settings.OPENSEARCH_METASEARCH_INDEX)
    return SearchService(
        searcher,
        get_schema(),
        registries,
        get_format_boosts(),
        blacklist,
        best_bets_checker=checker,
        settings=settings,
    )


def get_document_service(
    index: str,
    os: OpenSearch = Depends(get_opensearch),
    searcher: SearchPort = Depends(get_searcher),
) -> DocumentService:
    """
    경로의 {index}가 설정된 인덱스인지 확인하고 해당 인덱스용 DocumentService를 만든다.
    """
    if index not in settings.index_names:
        raise NoSuchIndex(index)
    promoter = None if index == settings.OPENSEARCH_METASEARCH_INDEX else get_promoter()
    return DocumentService(
        OpenSearchIndexer(os, index),
        get_schema(),
        index,
        searcher=searcher,
        promoter=promoter,
    )
