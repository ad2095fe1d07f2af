# src/store/crud/product.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.catalog.product_info import ProductInfo
from src.store.utils.errors import ConflictError, NotFoundError
from src.store.utils.timezone import now_local

logger = logging.getLogger(__name__)

_REQUIRED = ("name", "price", "stock", "is_active", "is_featured")


def _filtered(
    stmt,
    q: Optional[str] = None,
    category_id: Optional[int] = None,
    subcategory_id: Optional[int] = None,
    active: Optional[bool] = None,
    featured: Optional[bool] = None,
):
    if q:
        like = f"%{q.strip()}%"
        stmt = stmt.where(or_(ProductInfo.name.ilike(like), ProductInfo.description.ilike(like)))
    if category_id is not None:
        stmt = stmt.where(ProductInfo.category_id == category_id)
    if subcategory_id is not None:
        stmt = stmt.where(ProductInfo.subcategory_id == subcategory_id)
    if active is not None:
        stmt = stmt.where(ProductInfo.is_active.is_(active))
    if featured is not None:
        stmt = stmt.where(ProductInfo.is_featured.is_(featured))
    return stmt


async def list_products(
    db: AsyncSession,
    limit: int = 20,
    offset: int = 0,
    **filters: Any,
) -> Tuple[List[ProductInfo], int]:
    """One page of products plus the total matching the same filters."""
    total = await db.scalar(_filtered(select(func.count()).select_from(ProductInfo), **filters))
    stmt = _filtered(select(ProductInfo), **filters).order_by(ProductInfo.id.desc())
    res = await db.execute(stmt.limit(limit).offset(offset))
    return list(res.scalars().all()), int(total or 0)


async def get_product(db: AsyncSession, product_id: int) -> ProductInfo:
    row = await db.get(ProductInfo, product_id)
    if row is None:
        raise NotFoundError("Product", product_id)
    return row


async def create_product(db: AsyncSession, values: Dict[str, Any], created_by: str = "System") -> ProductInfo:
    stamp = now_local()
    row = ProductInfo(**values, created_by=created_by, updated_by=created_by, created_dt=stamp, updated_dt=stamp)
    db.add(row)
    try:
        await db.commit()
        await db.refresh(row)
    except IntegrityError as e:
        await db.rollback()
        logger.error("Integrity error while creating product: %s", e)
        raise ConflictError("Product references an unknown category") from e
    return row


async def update_product(
    db: AsyncSession,
    product_id: int,
    changes: Dict[str, Any],
    updated_by: str = "System",
) -> ProductInfo:
    row = await get_product(db, product_id)
    for key, value in changes.items():
        if key in _REQUIRED and value is None:
            continue
        setattr(row, key, value)
    row.updated_by = updated_by
    row.updated_dt = now_local()
    try:
        await db.commit()
        await db.refresh(row)
    except IntegrityError as e:
        await db.rollback()
        logger.error("Integrity error while updating product %s: %s", product_id, e)
        raise ConflictError("Product references an unknown category") from e
    return row


async def delete_product(db: AsyncSession, product_id: int) -> None:
    row = await get_product(db, product_id)
    await db.delete(row)
    await db.commit()
    logger.info("Product %s deleted", product_id)
