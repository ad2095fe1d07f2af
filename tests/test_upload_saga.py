from datetime import timedelta

from sqlalchemy import select

from src.store.crud.pending_upload import UploadLedger, list_orphaned_uploads, reconcile_orphaned_uploads
from src.store.models.ops.pending_upload import (
    STATUS_COMMITTED,
    STATUS_DISCARDED,
    STATUS_PENDING,
    PendingUpload,
)
from src.store.utils.errors import UploadError
from src.store.utils.timezone import now_local

HOUR = timedelta(hours=1)


async def _statuses(db):
    res = await db.execute(select(PendingUpload.public_id, PendingUpload.status).order_by(PendingUpload.id))
    return dict(res.all())


async def test_record_then_commit(db):
    ledger = UploadLedger(db)
    ref = await ledger.record("banners/a", "https://cdn/a.jpg")

    row = await db.get(PendingUpload, ref)
    assert row.status == STATUS_PENDING
    assert row.resource == "banner"

    await ledger.commit(ref, record_id=12)
    row = await db.get(PendingUpload, ref)
    assert row.status == STATUS_COMMITTED
    assert row.record_id == 12
    assert row.resolved_dt is not None


async def test_commit_of_unknown_ref_is_harmless(db):
    await UploadLedger(db).commit(999, record_id=1)


async def test_only_old_pending_rows_are_orphans(db):
    ledger = UploadLedger(db)
    await ledger.record("banners/old", "https://cdn/old.jpg")
    committed = await ledger.record("banners/kept", "https://cdn/kept.jpg")
    await ledger.commit(committed, record_id=1)

    assert await list_orphaned_uploads(db, max_age=HOUR) == []

    later = now_local() + 2 * HOUR
    orphans = await list_orphaned_uploads(db, max_age=HOUR, now=later)
    assert [o.public_id for o in orphans] == ["banners/old"]


async def test_reconcile_deletes_host_images_and_marks_rows(db):
    ledger = UploadLedger(db)
    await ledger.record("banners/orphan-1", "https://cdn/1.jpg")
    await ledger.record("banners/orphan-2", "https://cdn/2.jpg")
    kept = await ledger.record("banners/kept", "https://cdn/kept.jpg")
    await ledger.commit(kept, record_id=5)

    destroyed = []

    async def destroy(public_id):
        destroyed.append(public_id)

    stats = await reconcile_orphaned_uploads(db, destroy, max_age=HOUR, now=now_local() + 2 * HOUR)

    assert stats == {"discarded": 2, "failed": 0}
    assert destroyed == ["banners/orphan-1", "banners/orphan-2"]
    assert await _statuses(db) == {
        "banners/orphan-1": STATUS_DISCARDED,
        "banners/orphan-2": STATUS_DISCARDED,
        "banners/kept": STATUS_COMMITTED,
    }


async def test_failed_deletion_stays_pending_for_next_run(db):
    ledger = UploadLedger(db)
    await ledger.record("banners/stubborn", "https://cdn/s.jpg")
    await ledger.record("banners/easy", "https://cdn/e.jpg")

    async def destroy(public_id):
        if public_id == "banners/stubborn":
            raise UploadError("host unavailable")

    later = now_local() + 2 * HOUR
    stats = await reconcile_orphaned_uploads(db, destroy, max_age=HOUR, now=later)

    assert stats == {"discarded": 1, "failed": 1}
    assert (await _statuses(db))["banners/stubborn"] == STATUS_PENDING

    async def destroy_ok(public_id):
        return None

    stats = await reconcile_orphaned_uploads(db, destroy_ok, max_age=HOUR, now=later)
    assert stats == {"discarded": 1, "failed": 0}
    assert (await _statuses(db))["banners/stubborn"] == STATUS_DISCARDED
