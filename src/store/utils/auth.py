# src/store/utils/auth.py
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.user import User
from src.store.utils.database import get_db
from src.store.utils.security import create_access_token, decode_access_token, verify_password
from src.store.utils.session_context import get_session_context


def _extract_bearer(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization") or ""
    if auth.lower().startswith("bearer "):
        token = auth[7:].strip()
        return token or None
    # admin console pages call the API with the token kept in their session
    ctx = get_session_context(request)
    return ctx.token


def user_public(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "phone": user.phone,
        "role": user.role,
        "isAdmin": bool(user.is_admin),
    }


def issue_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "role": user.role})


async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
    user = await db.scalar(select(User).where(User.email == (email or "").strip().lower()))
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.password):
        return None
    return user


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    token = _extract_bearer(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    payload = decode_access_token(token)
    if not payload or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Invalid token payload")

    user = await db.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def require_admin(user: User) -> None:
    if not getattr(user, "is_admin", False):
        raise HTTPException(status_code=403, detail="Forbidden")


async def get_admin_user(current_user: User = Depends(get_current_user)) -> User:
    require_admin(current_user)
    return current_user
