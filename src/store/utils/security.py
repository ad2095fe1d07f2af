# src/store/utils/security.py
from __future__ import annotations

import time
from typing import Optional, Dict, Any

from jose import jwt, JWTError
from passlib.context import CryptContext

from src.store.config import settings

JWT_SECRET: str = settings.JWT_SECRET
JWT_ALG: str = settings.JWT_ALG
ACCESS_TOKEN_EXPIRE_MINUTES: int = settings.ACCESS_TOKEN_EXPIRE_MINUTES


# ---- Password hashing policy ----
pwd_context = CryptContext(
    schemes=["argon2", "bcrypt"],
    deprecated="auto",
)


# ---------------------------------------------------------------------
# Password Handling
# ---------------------------------------------------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


# ---------------------------------------------------------------------
# Token Handling - Access Token
# ---------------------------------------------------------------------
def create_access_token(data: Dict[str, Any], minutes: Optional[int] = None) -> str:
    """
    Signed JWT carrying `data` plus iat/exp claims.
    `sub` must be a string (user id as text).
    """
    now = int(time.time())
    ttl = (minutes if minutes is not None else ACCESS_TOKEN_EXPIRE_MINUTES) * 60
    claims = dict(data)
    claims.update({"iat": now, "exp": now + ttl, "typ": "access"})
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALG)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
    except JWTError:
        return None
    if payload.get("typ") != "access":
        return None
    return payload
