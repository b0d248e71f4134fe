from fastapi import APIRouter, Depends, Request
from search_api.app.api.deps import get_search_service
from search_api.app.domain.services.search_service import SearchService
from search_api.app.models.schemas import ApiResponse
from search_api.app.platform.response import ok
import logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


@router.get(
    "",
    summary="문서 검색",
    description=(
        "쿼리스트링으로 문서를 검색합니다. `q`, `start`/`count`, "
        "`filter_<field>`/`reject_<field>`(날짜는 `[before]`/`[after]`), "
        "`aggregate_<field>=N,examples:M,...`, `fields`, `order`, "
        "`debug`, `suggest=spelling`, `ab_tests=name:variant`를 지원합니다."
    ),
    operation_id="searchDocuments",
    status_code=200,
    response_model=ApiResponse,
    responses={
        200: {
            "description": "검색 성공",
            "content": {
                "application/json": {
                    "examples": {
                        "basic": {
                            "summary": "기본 검색 예시",
                            "value": {
                                "success": True,
                                "message": "검색 성공",
                                "data": {
                                    "results": [
                                        {
                                            "link": "/cheese-making",
                                            "title": "Cheese making",
                                            "format": "guide",
                                            "presentation_format": "guide",
                                            "humanized_format": "Guides",
                                            "_id": "/cheese-making",
                                            "index": "mainstream",
                                            "es_score": 12.34,
                                            "document_type": "edition",
                                        }
                                    ],
                                    "total": 2,
                                    "start": 0,
                                    "aggregates": {},
                                    "suggested_queries": [],
                                },
                                "trace_id": "5f0c...",
                            }
                        }
                    }
                }
            },
        },
        422: {"description": "잘못된 검색 파라미터"},
        503: {"description": "검색 엔진 연결 실패"},
    },
)
def search(request: Request, svc: SearchService = Depends(get_search_service)):
    raw = {}
    for key, value in request.query_params.multi_items():
        raw.setdefault(key, []).append(value)
    logger.info("SearchRequest: %s", raw)
    params = svc.parse(raw)
    result = svc.search(params)
    return ok(data=result, message="검색 성공")
