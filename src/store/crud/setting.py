# src/store/crud/setting.py
from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.ops.store_setting import StoreSetting
from src.store.utils.timezone import now_local


async def get_settings(db: AsyncSession) -> Dict[str, Any]:
    res = await db.execute(select(StoreSetting).order_by(StoreSetting.key))
    return {row.key: row.value for row in res.scalars().all()}


async def put_setting(db: AsyncSession, key: str, value: Any, updated_by: str = "System") -> StoreSetting:
    row = await db.get(StoreSetting, key)
    if row is None:
        row = StoreSetting(key=key)
        db.add(row)
    row.value = value
    row.updated_by = updated_by
    row.updated_dt = now_local()
    await db.commit()
    await db.refresh(row)
    return row
