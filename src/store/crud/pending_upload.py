# src/store/crud/pending_upload.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.ops.pending_upload import (
    PendingUpload,
    STATUS_COMMITTED,
    STATUS_DISCARDED,
    STATUS_PENDING,
)
from src.store.utils.timezone import now_local

logger = logging.getLogger(__name__)


class UploadLedger:
    """
    Records every image the authoring flow pushes to the host, so an upload
    whose record never got persisted can be found and removed later.
    """

    def __init__(self, db: AsyncSession, resource: str = "banner"):
        self.db = db
        self.resource = resource

    async def record(self, public_id: str, secure_url: str) -> int:
        row = PendingUpload(
            public_id=public_id,
            secure_url=secure_url,
            resource=self.resource,
            status=STATUS_PENDING,
            created_dt=now_local(),
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return int(row.id)

    async def commit(self, ref: int, record_id: int) -> None:
        row = await self.db.get(PendingUpload, ref)
        if row is None:
            logger.warning("Pending upload %s vanished before commit", ref)
            return
        row.status = STATUS_COMMITTED
        row.record_id = record_id
        row.resolved_dt = now_local()
        await self.db.commit()


async def list_orphaned_uploads(
    db: AsyncSession,
    max_age: timedelta,
    now: datetime | None = None,
) -> list[PendingUpload]:
    cutoff = (now or now_local()) - max_age
    stmt = (
        select(PendingUpload)
        .where(PendingUpload.status == STATUS_PENDING, PendingUpload.created_dt < cutoff)
        .order_by(PendingUpload.id.asc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def reconcile_orphaned_uploads(
    db: AsyncSession,
    destroy: Callable[[str], Awaitable[None]],
    max_age: timedelta,
    now: datetime | None = None,
) -> Dict[str, int]:
    """
    Delete host images of uploads that stayed pending longer than `max_age`
    and mark them discarded. A failed deletion leaves the row pending so the
    next run retries it.
    """
    stats = {"discarded": 0, "failed": 0}
    for row in await list_orphaned_uploads(db, max_age, now=now):
        try:
            await destroy(row.public_id)
        except Exception as e:
            stats["failed"] += 1
            logger.error("Could not delete orphaned upload %s (%s): %s", row.id, row.public_id, e)
            continue
        row.status = STATUS_DISCARDED
        row.resolved_dt = now_local()
        await db.commit()
        stats["discarded"] += 1
        logger.info("Discarded orphaned upload %s (%s)", row.id, row.public_id)
    return stats
