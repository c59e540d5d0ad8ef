# osconsole/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from osconsole.api.routes import (
    health,
    orders,
    statuses,
    dashboard,
    settings as settings_routes,
)

from osconsole.core.config import settings
from osconsole.core.logging import setup_logging, RequestIdMiddleware, log_extra
from osconsole.workflow.errors import BackendError, IncompleteServiceConfirmation, WorkflowError

setup_logging(settings.log_level)
log = logging.getLogger(__name__)

app = FastAPI(
    title="OS Console",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url=None,
    openapi_url="/api/openapi.json",
)

# ==== Middlewares ====
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RequestIdMiddleware)


# ==== Помилки workflow -> HTTP ====
@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    body = {"detail": exc.message, "code": exc.code}
    if isinstance(exc, IncompleteServiceConfirmation):
        body["missingServiceIds"] = exc.missing_service_ids
    if isinstance(exc, BackendError):
        # користувачу загальне повідомлення, деталі бекенду лише в лог
        log.warning(
            "backend_failure",
            extra={**log_extra(request), "upstream_status": exc.upstream_status,
                   "upstream_detail": exc.upstream_detail},
        )
    elif exc.status_code >= 500:
        log.error("workflow_failure", extra={**log_extra(request), "code": exc.code, "detail": exc.message})
    return JSONResponse(status_code=exc.status_code, content=body)


# ==== API під /api ====
app.include_router(health.router,          prefix="/api",          tags=["health"])
app.include_router(orders.router,          prefix="/api/os",       tags=["os"])
app.include_router(statuses.router,        prefix="/api/statuses", tags=["statuses"])
app.include_router(dashboard.router,       prefix="/api/dashboard", tags=["dashboard"])
app.include_router(settings_routes.router, prefix="/api/settings", tags=["settings"])
