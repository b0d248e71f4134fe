from fastapi import APIRouter, Depends
from opensearchpy import OpenSearch
from opensearchpy.exceptions import ConnectionError as OpenSearchConnectionError
from opensearchpy.exceptions import TransportError
from search_api.app.api.deps import get_opensearch
import logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health(os: OpenSearch = Depends(get_opensearch)):
    """프로세스 생존 + 검색 엔진 ping."""
    try:
        engine = bool(os.ping())
    except (OpenSearchConnectionError, TransportError) as e:
        logger.warning("health: engine ping failed err=%s", e)
        engine = False
    return {"ok": True, "engine": engine}
