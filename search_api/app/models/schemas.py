from pydantic import BaseModel, Field
from typing import Any, Optional


class ApiResponse(BaseModel):
    """
    공통 응답 봉투
    """
    success: bool = Field(..., description="성공 여부")
    message: str = Field(..., description="결과 메시지")
    # 검색: results/total/start/aggregates/suggested_queries(/search_query)
    # 문서 변경: {"result": "OK"}
    data: Any = Field(None, description="결과 본문. 내부 구조는 API에 따라 상이")
    trace_id: Optional[str] = Field(None, description="요청 ID(X-Request-ID)")
