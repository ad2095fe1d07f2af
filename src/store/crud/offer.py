# src/store/crud/offer.py
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.ops.offer_info import OfferInfo
from src.store.utils.errors import ConflictError, NotFoundError, ValidationError
from src.store.utils.timezone import today_local

logger = logging.getLogger(__name__)


async def list_offers(db: AsyncSession) -> List[OfferInfo]:
    res = await db.execute(select(OfferInfo).order_by(OfferInfo.id.desc()))
    return list(res.scalars().all())


async def list_active_offers(db: AsyncSession, today: Optional[date] = None) -> List[OfferInfo]:
    """Same visibility rule as banners: active and inside the date window."""
    today = today or today_local()
    stmt = (
        select(OfferInfo)
        .where(
            OfferInfo.is_active.is_(True),
            or_(OfferInfo.start_date.is_(None), OfferInfo.start_date <= today),
            or_(OfferInfo.end_date.is_(None), OfferInfo.end_date >= today),
        )
        .order_by(OfferInfo.id.asc())
    )
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def get_offer(db: AsyncSession, offer_id: int) -> OfferInfo:
    row = await db.get(OfferInfo, offer_id)
    if row is None:
        raise NotFoundError("Offer", offer_id)
    return row


async def _save(db: AsyncSession, row: OfferInfo) -> OfferInfo:
    try:
        await db.commit()
        await db.refresh(row)
    except IntegrityError as e:
        await db.rollback()
        logger.error("Integrity error while saving offer: %s", e)
        raise ConflictError(f"Offer code '{row.code}' is already in use") from e
    return row


async def create_offer(db: AsyncSession, values: Dict[str, Any]) -> OfferInfo:
    row = OfferInfo(**values)
    db.add(row)
    return await _save(db, row)


async def update_offer(db: AsyncSession, offer_id: int, changes: Dict[str, Any]) -> OfferInfo:
    row = await get_offer(db, offer_id)
    changes = {k: v for k, v in changes.items() if not (k in ("title", "discount_percent", "is_active") and v is None)}
    if "code" in changes and changes["code"]:
        changes["code"] = str(changes["code"]).upper()

    start = changes.get("start_date", row.start_date)
    end = changes.get("end_date", row.end_date)
    if start and end and start >= end:
        raise ValidationError({"endDate": "End date must be after start date"})

    for key, value in changes.items():
        setattr(row, key, value)
    return await _save(db, row)


async def delete_offer(db: AsyncSession, offer_id: int) -> None:
    row = await get_offer(db, offer_id)
    await db.delete(row)
    await db.commit()
