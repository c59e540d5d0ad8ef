# osconsole/core/logging.py
import contextvars
import logging
import logging.config
import time
import uuid
from typing import Any, Mapping
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

# id поточного HTTP-запиту; у воркері завжди порожній
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)

access_log = logging.getLogger("osconsole.access")


class RequestIdFilter(logging.Filter):
    """Додає record.request_id (або "-") до кожного запису, щоб формат не падав."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = _request_id.get() or "-"
        return True


def setup_logging(level: str = "INFO") -> None:
    """Єдина конфігурація логів для консолі, воркера та Uvicorn."""
    LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": RequestIdFilter},
        },
        "formatters": {
            "plain": {"format": LOG_FORMAT},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "filters": ["request_id"],
            },
        },
        "loggers": {
            "": {"handlers": ["default"], "level": level},
            "uvicorn": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            # свій access-лог пише middleware, uvicorn-івський лише дублював би його
            "uvicorn.access": {"handlers": ["default"], "level": "WARNING", "propagate": False},
            "rq.worker": {"handlers": ["default"], "level": level, "propagate": False},
        },
    })


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    X-Request-ID для трейсингу запитів консоль -> бекенд:
    - бере з вхідного заголовка або генерує новий,
    - кладе в request.state (звідти його бере BackendClient) і в contextvar для логів,
    - повертає в заголовку відповіді,
    - пише один рядок access-логу з тривалістю.
    """

    header_name = "X-Request-ID"

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = _request_id.set(request_id)
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
        finally:
            _request_id.reset(token)

        response.headers[self.header_name] = request_id
        access_log.info(
            "request_done",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )
        return response


def log_extra(request: Request) -> Mapping[str, Any]:
    """
    Хелпер для роутерів:
    log.info("os_status_request_done", extra={**log_extra(request), "os_id": order_id})
    """
    rid = getattr(request.state, "request_id", None)
    return {"request_id": rid} if rid else {}
