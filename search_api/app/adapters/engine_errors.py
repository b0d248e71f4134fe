"""
OpenSearch 예외 → 도메인 예외 변환.

- 연결 실패/타임아웃 → EngineUnavailable
- 숫자 범위 초과 → NumberOutOfRange
- 절 개수 초과(maxClauseCount) → QueryTooLong
- 쓰기 잠금(cluster_block_exception) → IndexLocked
- 그 밖의 400 → InvalidQuery
나머지는 그대로 전파한다.
"""

from __future__ import annotations

import json
import logging
import re
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from opensearchpy.exceptions import ConnectionError as OpenSearchConnectionError
from opensearchpy.exceptions import NotFoundError, RequestError, TransportError

from search_api.app.platform.exceptions import (
    EngineUnavailable,
    IndexLocked,
    InvalidQuery,
    NoSuchIndex,
    NumberOutOfRange,
    QueryTooLong,
)

log = logging.getLogger(__name__)

_NUMBER_OUT_OF_RANGE = re.compile(r"Numeric value \(([0-9]*)\) out of range")
_TOO_MANY_CLAUSES = re.compile(r"maxClauseCount|too_many_clauses|too_many_nested_clauses")
_INDEX_LOCKED = "cluster_block_exception"


def error_text(error: Any) -> str:
    """TransportError 또는 msearch 항목의 error에서 검사용 문자열을 만든다."""
    if isinstance(error, TransportError):
        info = error.info
        parts = [str(error.error)]
        if info:
            parts.append(info if isinstance(info, str) else json.dumps(info, default=str))
        return " ".join(parts)
    if isinstance(error, (dict, list)):
        return json.dumps(error, default=str)
    return str(error)


def classify_engine_error(text: str, status: Optional[int] = None,
                          index: Optional[str] = None) -> Optional[Exception]:
    m = _NUMBER_OUT_OF_RANGE.search(text)
    if m:
        return NumberOutOfRange(f"Integer value of {m.group(1)} exceeds maximum allowed")
    if _TOO_MANY_CLAUSES.search(text):
        return QueryTooLong("Query must be less than 1024 words")
    if _INDEX_LOCKED in text:
        return IndexLocked(index or "unknown")
    if status == 400:
        return InvalidQuery(f"Search engine rejected query: {text[:500]}")
    return None


@contextmanager
def engine_errors(index: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except OpenSearchConnectionError as e:
        log.error("engine: connection failed index=%s err=%s", index, e)
        raise EngineUnavailable(str(e)) from e
    except NotFoundError as e:
        raise NoSuchIndex(index or "unknown") from e
    except (RequestError, TransportError) as e:
        translated = classify_engine_error(error_text(e), _status(e), index)
        if translated is None:
            raise
        raise translated from e


def _status(error: TransportError) -> Optional[int]:
    status = error.status_code
    return status if isinstance(status, int) else None
