# src/store/crud/users.py
from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.user import User
from src.store.utils.errors import ConflictError, NotFoundError
from src.store.utils.security import hash_password

logger = logging.getLogger(__name__)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    return await db.scalar(select(User).where(User.email == (email or "").strip().lower()))


async def list_users(db: AsyncSession, limit: int = 100, offset: int = 0) -> List[User]:
    res = await db.execute(select(User).order_by(User.id.asc()).limit(limit).offset(offset))
    return list(res.scalars().all())


async def create_user(
    db: AsyncSession,
    name: str,
    email: str,
    password: str,
    phone: Optional[str] = None,
    is_admin: bool = False,
) -> User:
    """`password` is plain text; it is hashed here."""
    email_norm = (email or "").strip().lower()
    if await get_user_by_email(db, email_norm):
        raise ConflictError(f"Email '{email_norm}' is already registered.")

    user = User(
        name=name.strip(),
        email=email_norm,
        password=hash_password(password),
        phone=(phone or "").strip() or None,
        is_admin=is_admin,
    )
    db.add(user)
    try:
        await db.commit()
        await db.refresh(user)
    except IntegrityError as e:
        await db.rollback()
        logger.error("Integrity error while creating user %s: %s", email_norm, e)
        raise ConflictError(f"Email '{email_norm}' is already registered.") from e
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    try:
        res = await db.execute(delete(User).where(User.id == user_id))
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("User has orders and cannot be deleted") from e
    if not (res.rowcount or 0):
        raise NotFoundError("User", user_id)
