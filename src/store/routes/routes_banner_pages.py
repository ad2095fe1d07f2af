# src/store/routes/routes_banner_pages.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import (
    APIRouter,
    Request,
    Depends,
    Form,
    UploadFile,
    File,
    Query,
)
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.admin.banner_form import BannerFormController, FormState
from src.store.admin.gateways import DbBannerGateway
from src.store.crud.banner import delete_banner, get_total_banners_count, list_banners
from src.store.crud.pending_upload import UploadLedger
from src.store.utils.csrf import csrf_protect
from src.store.utils.database import get_db
from src.store.utils.errors import NotFoundError
from src.store.utils.flash import flash_popall, redirect_with_flash
from src.store.utils.image_host import ImageHostClient
from src.store.utils.session_context import SessionContext, require_admin_session
from src.store.utils.view import render

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/banners", tags=["Admin Banners"])

_TEXT_FIELDS = (
    "title",
    "subtitle",
    "description",
    "badge",
    "link",
    "button_text",
    "features",
    "order",
    "start_date",
    "end_date",
)


def _to_bool(v: Any) -> bool:
    return str(v).strip().lower() in ("true", "1", "yes", "y", "on")


def _text_values(*values: Optional[str]) -> Dict[str, Optional[str]]:
    return dict(zip(_TEXT_FIELDS, values))


def _actor(session_ctx: SessionContext) -> str:
    return str(session_ctx.user.get("email") or session_ctx.display_name)


def _controller(db: AsyncSession, session_ctx: SessionContext, banner_id: Optional[int] = None) -> BannerFormController:
    return BannerFormController(
        gateway=DbBannerGateway(db, actor=_actor(session_ctx)),
        uploader=ImageHostClient.from_settings(),
        ledger=UploadLedger(db, resource="banner"),
        banner_id=banner_id,
    )


async def _apply_form(
    form: BannerFormController,
    values: Dict[str, Optional[str]],
    is_active: Optional[str],
    image: Optional[str],
    image_file: Optional[UploadFile],
) -> None:
    for name in _TEXT_FIELDS:
        value = values.get(name)
        if value is not None:
            form.set_field(name, value)
    form.set_field("is_active", _to_bool(is_active) if is_active is not None else False)

    if image_file is not None and (image_file.filename or "").strip():
        data = await image_file.read()
        form.select_file(image_file.filename or "upload", image_file.content_type or "", data)
    elif image is not None and image.strip():
        form.set_field("image", image.strip())


async def _form_page(
    request: Request,
    form: BannerFormController,
    session_ctx: SessionContext,
    status_code: int = 200,
):
    mode = "edit" if form.is_edit else "create"
    title = f"Edit Banner ({form.banner_id})" if form.is_edit else "Create Banner"
    ctx: Dict[str, Any] = {
        "request": request,
        "title": title,
        "mode": mode,
        "banner_id": form.banner_id,
        "form": form.draft.as_form(),
        "errors": form.errors,
        "error": form.message if form.state == FormState.FAILURE else None,
        "preview_url": form.preview_url,
        "session_user": session_ctx.user,
        "flashes": await flash_popall(request.session),
    }
    return await render("admin/banners/form.html", ctx, status_code=status_code)


# ----------------------------------------------------------
# LIST
# ----------------------------------------------------------
@router.get("")
async def banners_list(
    request: Request,
    q: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=5, le=100),
    session_ctx: SessionContext = Depends(require_admin_session),
    db: AsyncSession = Depends(get_db),
):
    q = (q or "").strip()
    offset = (page - 1) * size

    rows = await list_banners(db, q=q or None, limit=size, offset=offset)
    total = await get_total_banners_count(db, q=q or None)
    pages = (total + size - 1) // size if size else 1

    ctx: Dict[str, Any] = {
        "request": request,
        "title": "Manage Banners",
        "rows": rows,
        "q": q,
        "page": page,
        "pages": pages,
        "size": size,
        "total": total,
        "session_user": session_ctx.user,
        "flashes": await flash_popall(request.session),
    }
    return await render("admin/banners/index.html", ctx)


# ----------------------------------------------------------
# CREATE
# ----------------------------------------------------------
@router.get("/new")
async def banners_new_page(
    request: Request,
    session_ctx: SessionContext = Depends(require_admin_session),
    db: AsyncSession = Depends(get_db),
):
    return await _form_page(request, _controller(db, session_ctx), session_ctx)


@router.post("/new", dependencies=[Depends(csrf_protect)])
async def banners_create(
    request: Request,
    title: Optional[str] = Form(None),
    subtitle: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    badge: Optional[str] = Form(None),
    link: Optional[str] = Form(None),
    button_text: Optional[str] = Form(None),
    features: Optional[str] = Form(None),
    order: Optional[str] = Form(None),
    is_active: Optional[str] = Form(None),
    start_date: Optional[str] = Form(None),
    end_date: Optional[str] = Form(None),
    image: Optional[str] = Form(None),
    image_file: Optional[UploadFile] = File(None),
    session_ctx: SessionContext = Depends(require_admin_session),
    db: AsyncSession = Depends(get_db),
):
    form = _controller(db, session_ctx)
    await _apply_form(form, _text_values(title, subtitle, description, badge, link, button_text,
                                        features, order, start_date, end_date),
                      is_active, image, image_file)

    if not await form.submit():
        return await _form_page(request, form, session_ctx, status_code=400)

    return await redirect_with_flash(request.session, "/admin/banners", "success", form.message or "Banner created")


# ----------------------------------------------------------
# EDIT
# ----------------------------------------------------------
@router.get("/{banner_id}/edit")
async def banners_edit_page(
    request: Request,
    banner_id: int,
    session_ctx: SessionContext = Depends(require_admin_session),
    db: AsyncSession = Depends(get_db),
):
    form = _controller(db, session_ctx, banner_id=banner_id)
    if not await form.load():
        return await redirect_with_flash(request.session, "/admin/banners", "error", form.message or "Banner not found")
    return await _form_page(request, form, session_ctx)


@router.post("/{banner_id}/edit", dependencies=[Depends(csrf_protect)])
async def banners_update(
    request: Request,
    banner_id: int,
    title: Optional[str] = Form(None),
    subtitle: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    badge: Optional[str] = Form(None),
    link: Optional[str] = Form(None),
    button_text: Optional[str] = Form(None),
    features: Optional[str] = Form(None),
    order: Optional[str] = Form(None),
    is_active: Optional[str] = Form(None),
    start_date: Optional[str] = Form(None),
    end_date: Optional[str] = Form(None),
    image: Optional[str] = Form(None),
    image_file: Optional[UploadFile] = File(None),
    session_ctx: SessionContext = Depends(require_admin_session),
    db: AsyncSession = Depends(get_db),
):
    form = _controller(db, session_ctx, banner_id=banner_id)
    if not await form.load():
        return await redirect_with_flash(request.session, "/admin/banners", "error", form.message or "Banner not found")

    await _apply_form(form, _text_values(title, subtitle, description, badge, link, button_text,
                                        features, order, start_date, end_date),
                      is_active, image, image_file)

    if not await form.submit():
        return await _form_page(request, form, session_ctx, status_code=400)

    return await redirect_with_flash(request.session, "/admin/banners", "success", form.message or "Banner updated")


# ----------------------------------------------------------
# DELETE
# ----------------------------------------------------------
@router.post("/{banner_id}/delete", dependencies=[Depends(csrf_protect)])
async def banners_delete(
    request: Request,
    banner_id: int,
    session_ctx: SessionContext = Depends(require_admin_session),
    db: AsyncSession = Depends(get_db),
):
    try:
        await delete_banner(db, banner_id)
    except NotFoundError:
        return await redirect_with_flash(request.session, "/admin/banners", "error", "Banner not found")

    logger.info("Banner %s deleted by %s", banner_id, _actor(session_ctx))
    return await redirect_with_flash(request.session, "/admin/banners", "success", "Banner deleted successfully")
