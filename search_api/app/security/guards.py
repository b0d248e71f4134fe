from fastapi import Header, HTTPException, status
from search_api.app.platform.config import settings


def require_api_key(x_api_key: str = Header(None, alias="X-API-Key")):
    """API_KEY가 설정된 경우에만 문서 변경 요청의 키를 검사한다."""
    expected = settings.API_KEY
    if not expected:
        return
    if not x_api_key or x_api_key != expected:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key")
