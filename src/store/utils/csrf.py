# src/store/utils/csrf.py
"""
Double-submit CSRF for the admin console.

Every HTML page response seeds a readable XSRF cookie once; state-changing
admin requests must echo it back in a header or a hidden form field.
"""
from __future__ import annotations

import secrets
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.responses import Response

from src.store.config import settings

IS_PROD = settings.ENVIRONMENT.lower() in ("prod", "production")
SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "TRACE"})


def csrf_token_for(request: Request) -> str:
    return request.cookies.get(settings.CSRF_COOKIE_NAME, "")


def ensure_csrf_cookie(resp: Response, request: Request) -> None:
    # set once per browser, never rotated on GET
    if settings.CSRF_COOKIE_NAME in request.cookies:
        return
    resp.set_cookie(
        key=settings.CSRF_COOKIE_NAME,
        value=secrets.token_urlsafe(32),
        httponly=False,                         # templates and fetch() read it
        samesite="none" if IS_PROD else "lax",
        secure=IS_PROD,
        path="/",
    )


async def csrf_cookie_middleware(request: Request, call_next):
    resp = await call_next(request)
    if request.method == "GET" and "text/html" in (resp.headers.get("content-type") or ""):
        ensure_csrf_cookie(resp, request)
    return resp


async def _submitted_token(request: Request) -> Optional[str]:
    token = request.headers.get(settings.CSRF_HEADER_NAME)
    if token:
        return token
    ctype = (request.headers.get("content-type") or "").lower()
    if "application/x-www-form-urlencoded" not in ctype and "multipart/form-data" not in ctype:
        return None
    value = (await request.form()).get(settings.CSRF_FORM_FIELD)
    return value if isinstance(value, str) else None


async def csrf_protect(request: Request) -> None:
    """Route dependency for admin console POSTs."""
    if request.method in SAFE_METHODS:
        return

    expected = request.cookies.get(settings.CSRF_COOKIE_NAME)
    if not expected:
        raise HTTPException(status_code=403, detail="CSRF cookie missing")

    submitted = await _submitted_token(request)
    if not submitted or not secrets.compare_digest(submitted, expected):
        raise HTTPException(status_code=403, detail="CSRF token missing or invalid")
