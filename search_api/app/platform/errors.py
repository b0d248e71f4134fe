from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import status
from search_api.app.platform.logging import request_id_ctx
from search_api.app.platform import exceptions as domainex
import logging

def error_envelope(message, code="BAD_REQUEST", details=None, trace_id=None):
    return {
        "success": False,
        "error": {
            "code": code, "message": message, "details": details
        },
        "trace_id": trace_id
    }

async def http_exception_handler(request: Request, exc: HTTPException):
    # 4xx, 5xx 에러
    return JSONResponse(status_code=exc.status_code,
                        content=error_envelope(
                            exc.detail,
                            code=f"HTTP_{exc.status_code}",
                            trace_id=request_id_ctx.get()))

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # 422 Unprocessable Entity
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
                        content=error_envelope(
                            "Unprocessable Entity",
                            code="VALIDATION_ERROR",
                            details=jsonable_errors(exc),
                            trace_id=request_id_ctx.get()))

async def unhandled_exception_handler(request: Request, exc: Exception):
    logging.getLogger(__name__).exception("Unhandled exception")
    # 500 Internal server error
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        content=error_envelope(
                            "Internal server error",
                            code="INTERNAL_ERROR",
                            trace_id=request_id_ctx.get()))

def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]

def classify(exc: domainex.DomainError):
    """
    도메인 예외 → (HTTP status, 에러 코드, details).
    하위 클래스부터 검사한다.
    """
    if isinstance(exc, domainex.ParameterValidationError):
        return status.HTTP_422_UNPROCESSABLE_CONTENT, "INVALID_QUERY", exc.errors
    if isinstance(exc, domainex.InvalidQuery):
        return status.HTTP_422_UNPROCESSABLE_CONTENT, "INVALID_QUERY", None
    if isinstance(exc, domainex.InvalidInput):
        return status.HTTP_400_BAD_REQUEST, "INVALID_INPUT", None
    if isinstance(exc, domainex.FieldError):
        return status.HTTP_403_FORBIDDEN, "FIELD_NOT_ALLOWED", {"field": exc.field_name}
    if isinstance(exc, domainex.ResourceNotFound):
        return status.HTTP_404_NOT_FOUND, "NOT_FOUND", None
    if isinstance(exc, domainex.PermissionDenied):
        return status.HTTP_403_FORBIDDEN, "PERMISSION_DENIED", None
    if isinstance(exc, domainex.IndexLocked):
        return status.HTTP_423_LOCKED, "INDEX_LOCKED", None
    if isinstance(exc, domainex.BulkIndexFailure):
        return status.HTTP_502_BAD_GATEWAY, "INDEXING_FAILED", {"failed": exc.failed_keys}
    if isinstance(exc, domainex.EngineUnavailable):
        return status.HTTP_503_SERVICE_UNAVAILABLE, "ENGINE_UNAVAILABLE", None
    return status.HTTP_400_BAD_REQUEST, "SERVICE_ERROR", None

async def domain_exception_handler(request: Request, exc: domainex.DomainError):
    """
    도메인/유즈케이스 예외를 HTTP로 매핑.
    """
    http_status, code, details = classify(exc)

    log = logging.getLogger(__name__)
    if http_status >= 500:
        log.error("Domain error: %s (%s) path=%s", exc, code, request.url.path)
    else:
        log.warning("Domain error: %s (%s) path=%s", exc, code, request.url.path)

    return JSONResponse(
        status_code=http_status,
        content=error_envelope(
            str(exc),
            code=code,
            details=details,
            trace_id=request_id_ctx.get())
    )
