# src/store/routes/banners_api.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.crud.banner import (
    create_banner,
    delete_banner,
    get_banner_by_id,
    list_banners,
    list_public_banners,
    update_banner,
)
from src.store.models.user import User
from src.store.schemas.banner_schema import BannerCreate, BannerOut, BannerUpdate
from src.store.utils.auth import get_admin_user
from src.store.utils.database import get_db

router = APIRouter(prefix="/api/banners", tags=["Banners"])


@router.get("/public", response_model=List[BannerOut])
async def api_public_banners(db: AsyncSession = Depends(get_db)):
    """Active banners visible today, in display order."""
    return await list_public_banners(db)


@router.get("", response_model=List[BannerOut])
async def api_list_banners(
    q: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_banners(db, q=(q or "").strip() or None, limit=limit, offset=offset)


@router.get("/{banner_id}", response_model=BannerOut)
async def api_get_banner(banner_id: int, db: AsyncSession = Depends(get_db)):
    return await get_banner_by_id(db, banner_id)


@router.post("", response_model=BannerOut, status_code=status.HTTP_201_CREATED)
async def api_create_banner(
    payload: BannerCreate,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await create_banner(db, payload, created_by=current_user.email)


@router.put("/{banner_id}", response_model=BannerOut)
async def api_update_banner(
    banner_id: int,
    payload: BannerUpdate,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    return await update_banner(db, banner_id, payload, updated_by=current_user.email)


@router.delete("/{banner_id}")
async def api_delete_banner(
    banner_id: int,
    current_user: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_banner(db, banner_id)
    return {"message": "Banner deleted successfully", "id": banner_id}
