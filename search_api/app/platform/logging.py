# app/platform/logging.py
import os
import json
import logging
import logging.config
from contextvars import ContextVar
from datetime import datetime, timezone

# ===== Request ID =====
request_id_ctx = ContextVar("request_id", default="-")

class RequestIDFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_ctx.get()
        return True

# 검색/색인 로그에 extra로 실려 오는 필드
EXTRA_FIELDS = (
    "http_method", "path", "query_string", "status_code", "duration_ms",
    "client_ip", "user_agent",
    "index", "query", "total", "took_ms", "doc_count",
)

# ===== JSON Formatter =====
class JsonFormatter(logging.Formatter):
    """
    JSON 라인 출력: Logstash에서 바로 파싱 가능.
    access 로그와 검색 로그의 extra 필드가 있으면 함께 싣는다.
    """
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
                                 .isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        for k in EXTRA_FIELDS:
            v = getattr(record, k, None)
            if v is not None:
                payload[k] = v

        return json.dumps(payload, ensure_ascii=False, default=str)

# ===== Text Formatter (로컬 확인용) =====
TEXT_DEFAULT = "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s"
TEXT_ACCESS = "%(asctime)s %(levelname)s [access] [%(request_id)s] %(message)s"


def _file_handler(log_dir: str, name: str, level: str, formatter: str) -> dict:
    return {
        "class": "logging.handlers.TimedRotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filename": f"{log_dir}/{name}.log",
        "when": "midnight",
        "backupCount": 14,
        "encoding": "utf-8",
        "filters": ["request_id"],
    }


def setup_logging(
    *,
    log_to_file: bool = False,
    log_dir: str = "/var/log/app",
    as_json: bool = True,
    level: str = "INFO",
) -> None:
    """
    - app 로그: root, uvicorn.error
    - access 로그: uvicorn.access (RequestContextMiddleware가 기록)
    - opensearch 클라이언트 로그는 WARNING 이상만 (요청마다 INFO가 찍힘)
    """
    os.environ.setdefault("TZ", "UTC")

    app_fmt = "json" if as_json else "text_default"
    access_fmt = "json" if as_json else "text_access"

    formatters = {
        "json": {"()": JsonFormatter},
        "text_default": {"format": TEXT_DEFAULT},
        "text_access": {"format": TEXT_ACCESS},
    }

    handlers = {
        "console_app": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": app_fmt,
            "filters": ["request_id"],
        },
        "console_access": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": access_fmt,
            "filters": ["request_id"],
        },
    }
    app_handlers = ["console_app"]
    access_handlers = ["console_access"]

    if log_to_file:
        os.makedirs(log_dir, exist_ok=True)
        handlers["file_app"] = _file_handler(log_dir, "app", level, app_fmt)
        handlers["file_access"] = _file_handler(log_dir, "access", level, access_fmt)
        app_handlers.append("file_app")
        access_handlers.append("file_access")

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": RequestIDFilter}
        },
        "formatters": formatters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": app_handlers,
                "level": level,
                "propagate": False,
            },
            "uvicorn.error": {
                "handlers": app_handlers,
                "level": level,
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": access_handlers,
                "level": level,
                "propagate": False,
            },
            "opensearch": {
                "handlers": app_handlers,
                "level": "WARNING",
                "propagate": False,
            },
        },
    })
