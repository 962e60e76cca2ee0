import json
import logging
import time
import traceback
from contextvars import ContextVar
from uuid import uuid4

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from salon_api.core.config import settings

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="-")
logger = logging.getLogger("salon_api.api")

SERVER_ERROR_MESSAGE = "Erreur serveur"
ROUTE_NOT_FOUND_MESSAGE = "Route not found"
VALIDATION_ERROR_MESSAGE = "Requête invalide"


def setup_observability() -> None:
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


def get_request_id() -> str:
    return request_id_ctx.get()


def log_event(event: str, **fields) -> None:
    logger.info(
        json.dumps(
            {"event": event, "request_id": get_request_id(), **fields},
            default=str,
        )
    )


def _resolve_request_id(request: Request) -> str:
    return (
        getattr(request.state, "request_id", None)
        or request.headers.get("x-request-id")
        or get_request_id()
    )


def _error_response(
    *,
    status_code: int,
    request: Request,
    code: str,
    message: str,
    details: list[dict] | None = None,
    headers: dict[str, str] | None = None,
    extra: dict | None = None,
) -> JSONResponse:
    content = {
        "error": message,
        "code": code,
        "request_id": _resolve_request_id(request),
        "path": request.url.path,
    }
    if details is not None:
        content["details"] = details
    if extra:
        content.update(extra)
    return JSONResponse(status_code=status_code, headers=headers, content=content)


async def request_logging_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid4())
    request.state.request_id = request_id
    token = request_id_ctx.set(request_id)
    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
    finally:
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            json.dumps(
                {
                    "event": "request",
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": status_code,
                    "duration_ms": duration_ms,
                }
            )
        )
        request_id_ctx.reset(token)

    response.headers["X-Request-ID"] = request_id
    response.headers["X-API-Timeout-Hint-Ms"] = str(settings.api_timeout_hint_ms)
    return response


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        json.dumps(
            {
                "event": "unhandled_exception",
                "request_id": _resolve_request_id(request),
                "path": request.url.path,
                "error": str(exc),
                "traceback": traceback.format_exc(limit=10),
            }
        )
    )
    extra = None
    if settings.expose_error_details and not settings.is_production:
        extra = {"message": str(exc)}
    return _error_response(
        status_code=500,
        request=request,
        code="internal_error",
        message=SERVER_ERROR_MESSAGE,
        extra=extra,
    )


_STATUS_CODE_MAP = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    422: "validation_error",
}


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = _STATUS_CODE_MAP.get(exc.status_code, "http_error")
    # No endpoint in scope means the router matched nothing.
    if exc.status_code == 404 and request.scope.get("endpoint") is None:
        message = ROUTE_NOT_FOUND_MESSAGE
        details = None
    elif isinstance(exc.detail, str):
        message = exc.detail
        details = None
    else:
        message = "HTTP error"
        details = exc.detail
    return _error_response(
        status_code=exc.status_code,
        request=request,
        code=code,
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        location = [str(part) for part in err.get("loc", []) if part != "body"]
        details.append(
            {
                "field": ".".join(location) if location else "body",
                "message": err.get("msg", "Invalid value"),
                "type": err.get("type"),
            }
        )

    return _error_response(
        status_code=400,
        request=request,
        code="validation_error",
        message=VALIDATION_ERROR_MESSAGE,
        details=details,
    )
