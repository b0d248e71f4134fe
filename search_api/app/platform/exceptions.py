from typing import List, Optional


class DomainError(Exception):
    """도메인/유즈케이스 공통 베이스 예외"""
    pass


class ResourceNotFound(DomainError):
    def __init__(self, resource: str, detail: Optional[str] = None):
        super().__init__(detail or f"{resource} not found")
        self.resource = resource


class DocumentNotFound(ResourceNotFound):
    def __init__(self, link: str):
        super().__init__("document", f"Document not found: {link}")
        self.link = link


class NoSuchIndex(ResourceNotFound):
    def __init__(self, index_name: str):
        super().__init__("index", f"Index name {index_name} is not configured")
        self.index_name = index_name


class PermissionDenied(DomainError):
    def __init__(self, resource: str, detail: Optional[str] = None):
        super().__init__(detail or f"{resource} permission denied")
        self.resource = resource


class InvalidInput(DomainError):
    def __init__(self, message: str):
        super().__init__(message)


# ---- 검색 쿼리 ----

class InvalidQuery(DomainError):
    def __init__(self, message: str):
        super().__init__(message)


class ParameterValidationError(InvalidQuery):
    """요청 파라미터 검증 실패. 실패 항목 전체를 errors에 담는다."""
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class NumberOutOfRange(InvalidQuery):
    pass


class QueryTooLong(InvalidQuery):
    pass


# ---- 문서 필드 ----

class FieldError(DomainError):
    def __init__(self, field_name: str, message: str):
        super().__init__(message)
        self.field_name = field_name


class UnknownFieldError(FieldError):
    def __init__(self, field_name: str):
        super().__init__(field_name, f"Unrecognised field '{field_name}'")


class ImmutableFieldError(FieldError):
    def __init__(self, field_name: str):
        super().__init__(field_name, f"Cannot change document field '{field_name}'")


# ---- 검색 엔진 ----

class IndexLocked(DomainError):
    def __init__(self, index_name: str):
        super().__init__(f"Index {index_name} is locked for writes")
        self.index_name = index_name


class BulkIndexFailure(DomainError):
    def __init__(self, index_name: str, failed_keys: List[str]):
        super().__init__(f"Failed inserts into {index_name}: {', '.join(failed_keys)}")
        self.index_name = index_name
        self.failed_keys = list(failed_keys)


class EngineUnavailable(DomainError):
    def __init__(self, reason: str):
        super().__init__(f"Search engine unavailable: {reason}")
