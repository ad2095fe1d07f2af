# src/store/routes/admin_auth_pages.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.utils.auth import authenticate_user, issue_token, user_public
from src.store.utils.csrf import csrf_protect
from src.store.utils.database import get_db
from src.store.utils.flash import flash_popall, redirect_with_flash
from src.store.utils.session_context import get_session_context
from src.store.utils.view import render

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin Auth"])

_AUTH_NOTICES = {
    "expired": "Your session has expired. Please log in again.",
    "forbidden": "Access denied. An administrator account is required.",
}


async def _login_page(request: Request, email: str = "", error: Optional[str] = None, status_code: int = 200):
    ctx: Dict[str, Any] = {
        "request": request,
        "title": "Admin Login",
        "email": email,
        "error": error,
        "flashes": await flash_popall(request.session),
    }
    return await render("admin/login.html", ctx, status_code=status_code)


@router.get("")
async def admin_home(request: Request):
    ctx = get_session_context(request)
    target = "/admin/banners" if ctx.is_admin else "/admin/login"
    return RedirectResponse(url=target, status_code=303)


@router.get("/login")
async def login_page(request: Request, auth: Optional[str] = Query(None)):
    if get_session_context(request).is_admin:
        return RedirectResponse(url="/admin/banners", status_code=303)
    return await _login_page(request, error=_AUTH_NOTICES.get(auth or ""))


@router.post("/login", dependencies=[Depends(csrf_protect)])
async def login_submit(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate_user(db, email, password)
    if not user:
        logger.warning("Admin login failed for %s", email)
        return await _login_page(request, email=email, error="Invalid email or password.", status_code=401)
    if not user.is_admin:
        logger.warning("Non-admin %s tried to sign in to the admin console", email)
        return await _login_page(request, email=email, error=_AUTH_NOTICES["forbidden"], status_code=403)

    get_session_context(request).establish(request.session, issue_token(user), user_public(user))
    logger.info("Admin %s signed in", user.email)
    return await redirect_with_flash(request.session, "/admin/banners", "success", f"Welcome back, {user.name}")


@router.post("/logout", dependencies=[Depends(csrf_protect)])
async def logout(request: Request):
    ctx = get_session_context(request)
    who = ctx.display_name
    ctx.teardown(request.session)
    logger.info("%s signed out", who)
    return await redirect_with_flash(request.session, "/admin/login", "success", "You have been logged out.")
