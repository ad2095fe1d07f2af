# src/store/models/ops/pending_upload.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.store.utils.database import Base
from src.store.utils.timezone import now_local

STATUS_PENDING = "pending"
STATUS_COMMITTED = "committed"
STATUS_DISCARDED = "discarded"


class PendingUpload(Base):
    """
    One image pushed to the external host by an authoring form.

    Written as `pending` right after the host accepted the bytes and flipped to
    `committed` once the record that references the URL is persisted. Rows left
    `pending` past the configured age are orphans and get reconciled.
    """
    __tablename__ = "pending_uploads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    public_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    secure_url: Mapped[str] = mapped_column(String(500), nullable=False)
    resource: Mapped[str] = mapped_column(String(30), nullable=False, default="banner")
    record_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default=STATUS_PENDING, index=True)
    created_dt: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_local, nullable=False)
    resolved_dt: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<PendingUpload {self.id} {self.public_id} {self.status}>"
