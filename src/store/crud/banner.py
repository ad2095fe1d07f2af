# src/store/crud/banner.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.ops.banner_info import BannerInfo
from src.store.schemas.banner_schema import BannerCreate, BannerUpdate, check_banner_fields
from src.store.utils.errors import NotFoundError, ValidationError
from src.store.utils.timezone import now_local, today_local

logger = logging.getLogger(__name__)

_EDITABLE = (
    "title",
    "subtitle",
    "description",
    "image",
    "badge",
    "link",
    "button_text",
    "features",
    "order",
    "is_active",
    "start_date",
    "end_date",
)


def _raise_if_invalid(values: Dict[str, Any]) -> None:
    errors = check_banner_fields(
        values.get("title"),
        values.get("image"),
        values.get("start_date"),
        values.get("end_date"),
    )
    if errors:
        raise ValidationError(errors)


# -------- Get one banner --------
async def get_banner(db: AsyncSession, banner_id: int) -> BannerInfo | None:
    stmt = select(BannerInfo).where(BannerInfo.id == banner_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_banner_by_id(db: AsyncSession, banner_id: int) -> BannerInfo:
    row = await get_banner(db, banner_id)
    if row is None:
        raise NotFoundError("Banner", banner_id)
    return row


# -------- List banners (admin) --------
async def list_banners(
    db: AsyncSession,
    q: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[BannerInfo]:
    stmt = select(BannerInfo)

    if q:
        stmt = stmt.where(BannerInfo.title.ilike(f"%{q.strip()}%"))

    # display order first, then id as a stable tie-break
    stmt = stmt.order_by(BannerInfo.order.asc(), BannerInfo.id.asc())

    result = await db.execute(stmt.limit(limit).offset(offset))
    return list(result.scalars().all())


async def get_total_banners_count(db: AsyncSession, q: str | None = None) -> int:
    stmt = select(func.count()).select_from(BannerInfo)

    if q:
        stmt = stmt.where(BannerInfo.title.ilike(f"%{q.strip()}%"))

    result = await db.execute(stmt)
    return int(result.scalar_one() or 0)


# -------- Public banners (storefront carousel) --------
async def list_public_banners(db: AsyncSession, today: date | None = None) -> list[BannerInfo]:
    """
    Active banners whose visibility window contains `today`
    (a missing start or end date leaves that side open), lowest `order` first.
    """
    today = today or today_local()
    stmt = (
        select(BannerInfo)
        .where(
            BannerInfo.is_active.is_(True),
            or_(BannerInfo.start_date.is_(None), BannerInfo.start_date <= today),
            or_(BannerInfo.end_date.is_(None), BannerInfo.end_date >= today),
        )
        .order_by(BannerInfo.order.asc(), BannerInfo.id.asc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


# -------- Create banner --------
async def create_banner(
    db: AsyncSession,
    banner: BannerCreate,
    created_by: str = "System",
) -> BannerInfo:
    values = banner.model_dump(include=set(_EDITABLE))
    _raise_if_invalid(values)

    stamp = now_local()
    row = BannerInfo(
        **values,
        created_by=created_by,
        updated_by=created_by,
        created_dt=stamp,
        updated_dt=stamp,
    )

    db.add(row)
    try:
        await db.commit()
        await db.refresh(row)
    except IntegrityError as e:
        await db.rollback()
        logger.error("Integrity error while creating banner: %s", e)
        raise

    logger.info("Banner %s created by %s", row.id, created_by)
    return row


# -------- Update banner --------
async def update_banner(
    db: AsyncSession,
    banner_id: int,
    banner: BannerUpdate,
    updated_by: str = "System",
) -> BannerInfo:
    banner_info = await get_banner_by_id(db, banner_id)

    changes = banner.model_dump(include=set(_EDITABLE), exclude_unset=True)
    # required columns cannot be cleared through a partial update
    for key in ("order", "is_active"):
        if key in changes and changes[key] is None:
            changes.pop(key)

    merged = {key: getattr(banner_info, key) for key in _EDITABLE}
    merged.update(changes)
    _raise_if_invalid(merged)

    for key, value in changes.items():
        setattr(banner_info, key, value)
    banner_info.updated_by = updated_by
    banner_info.updated_dt = now_local()

    try:
        await db.commit()
        await db.refresh(banner_info)
    except IntegrityError as e:
        await db.rollback()
        logger.error("Integrity error while updating banner: %s", e)
        raise
    except Exception as e:
        await db.rollback()
        logger.error("Unexpected error while updating banner: %s", e)
        raise

    logger.info("Banner %s updated by %s", banner_id, updated_by)
    return banner_info


# -------- Delete banner --------
async def delete_banner(db: AsyncSession, banner_id: int) -> None:
    """Remove the banner; an unknown id is a NotFoundError, not a silent no-op."""
    stmt = delete(BannerInfo).where(BannerInfo.id == banner_id)
    result = await db.execute(stmt)
    await db.commit()
    if not (result.rowcount or 0):
        raise NotFoundError("Banner", banner_id)
    logger.info("Banner %s deleted", banner_id)
