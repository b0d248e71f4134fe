# app/platform/response.py
from search_api.app.platform.logging import request_id_ctx

def ok(data=None, message="ok"):
    return {"success": True, "message": message, "data": data, "trace_id": request_id_ctx.get()}

def ack(result: bool, message: str = "ok"):
    """문서 변경 요청의 단순 성공/실패 응답."""
    return ok(data={"result": "OK" if result else "error"}, message=message)
