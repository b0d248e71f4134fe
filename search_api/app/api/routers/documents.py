from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from starlette.concurrency import run_in_threadpool
from typing import Any, Dict, List, Optional, Union
from search_api.app.api.deps import get_document_service
from search_api.app.domain.services.document_service import DocumentService
from search_api.app.models.schemas import ApiResponse
from search_api.app.platform.exceptions import InvalidInput
from search_api.app.platform.response import ack, ok
from search_api.app.security.guards import require_api_key
import logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["documents"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def normalize_link(link: str) -> str:
    """경로로 받은 link는 앞의 '/'가 빠져 있으므로 되돌린다(외부 URL 제외)."""
    if link.startswith(("/", "http://", "https://")):
        return link
    return "/" + link


@router.post(
    "/{index}/documents",
    summary="문서 적재",
    description="JSON 문서 1건 또는 목록을 인덱스에 적재합니다. 스키마에 없는 필드는 무시합니다.",
    operation_id="addDocuments",
    response_model=ApiResponse,
    dependencies=[Depends(require_api_key)],
    responses={
        404: {"description": "설정되지 않은 인덱스"},
        423: {"description": "인덱스 쓰기 잠금"},
        502: {"description": "일부 문서 적재 실패"},
    },
)
def add_documents(
    payload: Union[Dict[str, Any], List[Dict[str, Any]]] = Body(...),
    svc: DocumentService = Depends(get_document_service),
):
    indexed = svc.add(payload)
    return ok(data={"result": "OK", "indexed": indexed}, message="문서 적재 성공")


@router.get(
    "/{index}/documents/{link:path}",
    summary="문서 조회",
    operation_id="getDocument",
    response_model=ApiResponse,
    responses={404: {"description": "문서 없음"}},
)
def get_document(link: str, svc: DocumentService = Depends(get_document_service)):
    return ok(data=svc.get(normalize_link(link)), message="문서 조회 성공")


@router.post(
    "/{index}/documents/{link:path}",
    summary="문서 필드 수정",
    description=(
        "form 데이터로 받은 필드만 덮어씁니다. "
        "스키마에 없는 필드나 link 수정은 403으로 거부되며 문서는 바뀌지 않습니다."
    ),
    operation_id="amendDocument",
    response_model=ApiResponse,
    dependencies=[Depends(require_api_key)],
    responses={
        403: {"description": "허용되지 않는 필드"},
        404: {"description": "문서 없음"},
        415: {"description": "form 데이터가 아님"},
    },
)
async def amend_document(
    link: str,
    request: Request,
    svc: DocumentService = Depends(get_document_service),
):
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith(FORM_CONTENT_TYPES):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Amendments require form data")
    form = await request.form()
    updates: Dict[str, Any] = {}
    for key in form.keys():
        values = form.getlist(key)
        updates[key] = values if len(values) > 1 else values[0]
    document = await run_in_threadpool(svc.amend, normalize_link(link), updates)
    return ok(data={"result": "OK", "document": document}, message="문서 수정 성공")


@router.delete(
    "/{index}/documents/{link:path}",
    summary="문서 삭제",
    operation_id="deleteDocument",
    response_model=ApiResponse,
    dependencies=[Depends(require_api_key)],
    responses={404: {"description": "문서 없음"}},
)
def delete_document(link: str, svc: DocumentService = Depends(get_document_service)):
    svc.delete(normalize_link(link))
    return ack(True, message="문서 삭제 성공")


@router.delete(
    "/{index}/documents",
    summary="문서 삭제(쿼리)",
    description="`link=...`로 한 건을, `delete_all=true`로 인덱스의 모든 문서를 삭제합니다.",
    operation_id="deleteDocuments",
    response_model=ApiResponse,
    dependencies=[Depends(require_api_key)],
)
def delete_documents(
    link: Optional[str] = Query(None, description="삭제할 문서 link"),
    delete_all: bool = Query(False, description="전체 삭제 여부"),
    svc: DocumentService = Depends(get_document_service),
):
    if delete_all:
        deleted = svc.delete_all()
        return ok(data={"result": "OK", "deleted": deleted}, message="전체 문서 삭제 성공")
    if not link:
        raise InvalidInput("Either link or delete_all=true is required")
    svc.delete(normalize_link(link))
    return ack(True, message="문서 삭제 성공")


@router.post(
    "/{index}/commit",
    summary="인덱스 refresh",
    operation_id="commitIndex",
    response_model=ApiResponse,
    dependencies=[Depends(require_api_key)],
)
def commit(svc: DocumentService = Depends(get_document_service)):
    svc.commit()
    return ack(True, message="커밋 성공")
