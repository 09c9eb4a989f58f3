# app/core/errors.py
from __future__ import annotations

import logging
import os
import traceback
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = logging.getLogger("app.errors")


# -----------------------------
# Domain exceptions
# -----------------------------
class AppError(Exception):
    """Base for errors that map onto a JSON error response."""

    status_code = 500

    def __init__(self, message: str, *, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigError(AppError):
    """Missing/invalid configuration (env var, API key). Fails before any work."""

    status_code = 500


class NotFoundError(AppError):
    status_code = 404


class UpstreamAPIError(AppError):
    """Non-2xx answer from an upstream HTTP API; status is propagated to the caller."""

    def __init__(self, message: str, *, status_code: int, details: Optional[Any] = None):
        super().__init__(message, details=details)
        self.status_code = int(status_code)


def _include_stack() -> bool:
    return os.getenv("ERROR_INCLUDE_STACK", "1").strip().lower() in {"1", "true", "yes", "on"}


# -----------------------------
# Trace / request id helpers
# -----------------------------
def _ensure_trace_id(request: Request) -> str:
    """
    Return a stable trace_id for this request.
    Prefer a value already set on request.state, then common headers,
    and finally generate a new one (and store it on request.state).
    """
    for attr in ("trace_id", "request_id"):
        val = getattr(getattr(request, "state", object()), attr, None)
        if val:
            return str(val)

    for h in ("x-request-id", "x-correlation-id", "x-trace-id"):
        v = request.headers.get(h)
        if v:
            request.state.trace_id = v
            return v

    new_id = uuid.uuid4().hex
    request.state.trace_id = new_id
    return new_id


def error_body(
    message: str,
    *,
    details: Optional[Any] = None,
    trace_id: Optional[str] = None,
    stack: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": message}
    if details is not None:
        body["details"] = details
    if stack is not None:
        body["stack"] = stack
    if trace_id is not None:
        body["trace_id"] = trace_id
    return body


# -----------------------------
# Install / register handlers
# -----------------------------
def register_exception_handlers(app: FastAPI) -> None:
    """
    Registers consistent JSON error handlers: {"error", "details"?, "stack"?, "trace_id"}.
    Also ensures X-Request-ID header is present on error responses.
    """

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        trace_id = _ensure_trace_id(request)
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        log.log(
            level,
            "%s %s %s -> %s | trace_id=%s | %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.status_code,
            trace_id,
            exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            headers={"X-Request-ID": trace_id},
            content=error_body(exc.message, details=exc.details, trace_id=trace_id),
        )

    @app.exception_handler(HTTPException)
    async def http_exc_handler(request: Request, exc: HTTPException):
        trace_id = _ensure_trace_id(request)
        status_code = int(exc.status_code)
        # detail can be str, dict, or other; keep a safe message
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        details = exc.detail if isinstance(exc.detail, dict) else None

        headers = dict(exc.headers or {})
        headers["X-Request-ID"] = trace_id

        level = logging.ERROR if status_code >= 500 else logging.WARNING
        log.log(
            level,
            "HTTPException %s %s -> %s | trace_id=%s | detail=%r",
            request.method,
            request.url.path,
            status_code,
            trace_id,
            exc.detail,
        )

        return JSONResponse(
            status_code=status_code,
            headers=headers,
            content=error_body(message, details=details, trace_id=trace_id),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        trace_id = _ensure_trace_id(request)
        errors = exc.errors()
        log.warning(
            "ValidationError %s %s -> 422 | trace_id=%s | errors=%s",
            request.method,
            request.url.path,
            trace_id,
            errors,
        )
        return JSONResponse(
            status_code=422,
            headers={"X-Request-ID": trace_id},
            content=error_body(
                "Validation failed.",
                details=[
                    {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
                    for e in errors
                ],
                trace_id=trace_id,
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        trace_id = _ensure_trace_id(request)
        log.exception(
            "Unhandled exception %s %s -> 500 | trace_id=%s",
            request.method,
            request.url.path,
            trace_id,
        )
        stack = (
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            if _include_stack()
            else None
        )
        return JSONResponse(
            status_code=500,
            headers={"X-Request-ID": trace_id},
            content=error_body(str(exc) or type(exc).__name__, stack=stack, trace_id=trace_id),
        )
