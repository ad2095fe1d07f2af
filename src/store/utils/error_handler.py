# src/store/utils/error_handler.py
from __future__ import annotations

import logging
import inspect
from typing import Any, Dict

from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.store.utils.errors import (
    ConflictError,
    NetworkError,
    NotFoundError,
    StoreError,
    UploadError,
    ValidationError,
)

logger = logging.getLogger("fastapi")

# domain error -> (status, default message)
_DOMAIN_STATUS = (
    (ValidationError, 422, "Validation error occurred"),
    (NotFoundError, 404, "The requested resource was not found."),
    (ConflictError, 409, "The request conflicts with the current state."),
    (UploadError, 502, "Image upload failed"),
    (NetworkError, 503, "Upstream service unavailable"),
)


def _trace(msg: str) -> None:
    """Debug trace with the call-site file and line."""
    f = inspect.currentframe()
    if f and f.f_back:
        c = f.f_back
        logger.debug("[TRACE] %s:%s | %s", c.f_code.co_filename, c.f_lineno, msg)
    else:
        logger.debug("[TRACE] <unknown> | %s", msg)


def _safe_args(exc: Exception) -> str:
    a = getattr(exc, "args", None)
    return str(a) if a else "No additional details"


def _json_error(
    status_code: int,
    message: str,
    exc: Exception,
    extra: Dict[str, Any] | None = None,
) -> JSONResponse:
    """
    Unified JSON error body: {message, error_type, status_code, ...extra}.
    Auth and server failures get fixed user-facing wording.
    """
    user_message = message
    if status_code == 401:
        user_message = "Your session has timed out for security reasons. Please log in again."
    elif status_code == 403:
        user_message = "Access denied. You do not have permission to access this page."
    elif status_code == 500:
        user_message = "Internal Server Error. Please try again later."

    payload: Dict[str, Any] = {
        "message": user_message,
        "error_type": exc.__class__.__name__,
        "status_code": status_code,
    }
    if extra:
        payload.update(extra)

    _trace(f"RETURN JSONResponse | status={status_code} message={user_message!r}")
    return JSONResponse(status_code=status_code, content=payload)


def _log_http(request: Request, status_code: int, detail: str, exc: Exception) -> None:
    """
    Log levels:
    - 404 -> INFO
    - 401/403 -> WARNING
    - other 4xx -> ERROR
    - 5xx -> EXCEPTION (stack trace)
    """
    url = str(request.url)
    method = request.method

    if status_code == 404:
        logger.info("404 Not Found: %s %s", method, url)
        return

    if status_code in (401, 403):
        logger.warning("%s: %s %s | detail=%s", status_code, method, url, detail)
        return

    if 400 <= status_code < 500:
        logger.error(
            "%s: %s %s | detail=%s | args=%s",
            status_code,
            method,
            url,
            detail,
            _safe_args(exc),
        )
        return

    if isinstance(exc, StoreError):
        # upstream failures are expected conditions, no traceback
        logger.error("%s: %s %s | detail=%s", status_code, method, url, detail)
        return

    logger.exception("%s: %s %s | detail=%s", status_code, method, url, detail)


def _wants_html(request: Request) -> bool:
    """
    HTML means browser navigation (document) or Accept includes text/html.
    Accept: */* alone is not HTML (fetch sends it).
    """
    accept = (request.headers.get("accept") or "").lower()

    if "text/html" in accept:
        return True
    if "application/json" in accept:
        return False

    dest = (request.headers.get("sec-fetch-dest") or "").lower()
    mode = (request.headers.get("sec-fetch-mode") or "").lower()
    return dest == "document" or mode == "navigate"


def _is_admin_page(request: Request) -> bool:
    path = request.url.path
    return path.startswith("/admin") and not path.startswith("/admin/login")


def _domain_response(request: Request, exc: StoreError) -> JSONResponse:
    for cls, status, default in _DOMAIN_STATUS:
        if isinstance(exc, cls):
            message = str(exc) or default
            _log_http(request, status, message, exc)
            extra = {"errors": exc.errors} if isinstance(exc, ValidationError) else None
            return _json_error(status_code=status, message=message, exc=exc, extra=extra)

    _log_http(request, 500, str(exc), exc)
    return _json_error(status_code=500, message=str(exc), exc=exc)


async def custom_exception_handler(request: Request, exc: Exception):
    """
    One handler for HTTP errors, request validation, domain errors and
    anything unexpected.

    Browser navigations to /admin/* that end in 401/403 are sent to the
    admin login page with a flag the page turns into a notice.
    """
    _trace(f"ENTER handler | path={request.url.path} method={request.method} exc={exc.__class__.__name__}")

    if isinstance(exc, StarletteHTTPException):
        status = int(exc.status_code)
        detail = str(exc.detail)

        _log_http(request, status, detail, exc)

        if (
            request.method in ("GET", "HEAD")
            and _is_admin_page(request)
            and _wants_html(request)
            and status in (401, 403)
        ):
            flag = "expired" if status == 401 else "forbidden"
            _trace(f"RETURN RedirectResponse -> /admin/login?auth={flag} (303)")
            return RedirectResponse(url=f"/admin/login?auth={flag}", status_code=303)

        if status == 404 and detail == "Not Found":
            detail = "Route not found"
        return _json_error(status_code=status, message=detail, exc=exc)

    if isinstance(exc, RequestValidationError):
        logger.warning(
            "422 Validation error: %s %s | %s",
            request.method,
            str(request.url),
            exc.errors(),
        )
        return _json_error(
            status_code=422,
            message="Validation error occurred",
            exc=exc,
            extra={"validation_errors": jsonable_encoder(exc.errors())},
        )

    if isinstance(exc, StoreError):
        return _domain_response(request, exc)

    logger.exception("500 Unhandled exception: %s %s | %s", request.method, str(request.url), str(exc))
    return _json_error(
        status_code=500,
        message="Internal Server Error. Please try again later.",
        exc=exc,
    )
