# src/store/utils/session_context.py
"""
Explicit auth session passed to whoever needs it.

A request builds its SessionContext once from the signed session cookie
(`get_session_context`); login establishes it, logout tears it down. Pages and
API clients receive the context instead of reading storage on their own.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, MutableMapping, Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.store.models.user import User
from src.store.utils.database import get_db
from src.store.utils.security import decode_access_token

logger = logging.getLogger(__name__)

SESSION_KEY = "auth"


@dataclass
class SessionContext:
    token: Optional[str] = None
    user: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_session(cls, session: MutableMapping[str, Any]) -> "SessionContext":
        data = session.get(SESSION_KEY) or {}
        if not isinstance(data, dict) or not data.get("token"):
            return cls()
        user = data.get("user")
        return cls(token=str(data["token"]), user=dict(user) if isinstance(user, dict) else {})

    def establish(self, session: MutableMapping[str, Any], token: str, user: Dict[str, Any]) -> None:
        self.token = token
        self.user = dict(user)
        session[SESSION_KEY] = {"token": token, "user": self.user}

    def teardown(self, session: MutableMapping[str, Any]) -> None:
        session.pop(SESSION_KEY, None)
        self.token = None
        self.user = {}

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_admin(self) -> bool:
        if not self.is_authenticated:
            return False
        role = str(self.user.get("role") or "").lower()
        return role == "admin" or self.user.get("is_admin") is True

    @property
    def display_name(self) -> str:
        return str(self.user.get("name") or self.user.get("email") or "System")

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}


def get_session_context(request: Request) -> SessionContext:
    ctx = getattr(request.state, "session_ctx", None)
    if ctx is None:
        ctx = SessionContext.from_session(request.session)
        request.state.session_ctx = ctx
    return ctx


async def require_admin_session(request: Request, db: AsyncSession = Depends(get_db)) -> SessionContext:
    """
    The cookie only caches who logged in. Every admin page re-reads the
    account, so losing the account or the admin flag takes effect at once.
    """
    ctx = get_session_context(request)
    if not ctx.is_authenticated:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user: Optional[User] = None
    payload = decode_access_token(ctx.token or "")
    if payload and str(payload.get("sub") or "").isdigit():
        user = await db.get(User, int(payload["sub"]))

    if user is None or not user.is_active:
        logger.warning("Dropping admin session for %s: account gone or inactive", ctx.user.get("email"))
        ctx.teardown(request.session)
        raise HTTPException(status_code=401, detail="Session expired")
    if not user.is_admin:
        logger.warning("Dropping admin session for %s: no longer an admin", user.email)
        ctx.teardown(request.session)
        raise HTTPException(status_code=403, detail="Forbidden")

    ctx.user.update(email=user.email, name=user.name, role=user.role)
    return ctx
