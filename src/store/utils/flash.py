# src/store/utils/flash.py
from __future__ import annotations

import json
import secrets
import logging
from typing import Any, Coroutine, Dict, List, MutableMapping, Optional, cast

from starlette.responses import RedirectResponse

from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.store.config import settings

logger = logging.getLogger(__name__)

Session = MutableMapping[str, Any]
_FLASH_SESSION_KEY = "flashq"
_FLASH_SID_KEY = "_flash_sid"

_redis: Optional[Redis] = None
_REDIS_OK: bool = bool(settings.REDIS_URL)


def _get_redis() -> Optional[Redis]:
    """Create and cache an asyncio Redis client (no network I/O here)."""
    global _redis, _REDIS_OK
    if not _REDIS_OK:
        return None
    if _redis is None:
        try:
            _redis = Redis.from_url(
                settings.REDIS_URL,
                encoding="utf-8",
                decode_responses=True,
            )
        except (RedisError, ValueError) as e:
            logger.warning("Redis unavailable for flashes, using session: %s", e)
            _REDIS_OK = False
            _redis = None
    return _redis


async def _redis_available() -> bool:
    """
    True if Redis is reachable. Failures are pinned for the process lifetime.
    """
    global _REDIS_OK
    r = _get_redis()
    if r is None:
        return False
    try:
        ok = await cast(Coroutine[Any, Any, bool], r.ping())
    except (RedisError, OSError) as e:
        logger.warning("Redis ping failed, flashes fall back to session: %s", e)
        ok = False
    if not ok:
        _REDIS_OK = False
    return bool(ok)


def _flash_key(session: Session) -> str:
    sid = session.get(_FLASH_SID_KEY)
    if not sid:
        sid = secrets.token_hex(12)
        session[_FLASH_SID_KEY] = sid
    return f"{settings.FLASH_PREFIX}{sid}"


def _clean(item: Any) -> Optional[Dict[str, str]]:
    if not isinstance(item, dict):
        return None
    return {
        "category": str(item.get("category", "")),
        "message": str(item.get("message", "")),
    }


async def flash_add(session: Session, category: str, text: str) -> None:
    """
    Add a flash message. Prefer a Redis list per session; if Redis is down,
    store on the session itself.
    """
    item: Dict[str, str] = {"category": category, "message": text}

    if await _redis_available():
        r = _get_redis()
        if r is not None:
            key = _flash_key(session)
            try:
                await cast(Coroutine[Any, Any, int], r.rpush(key, json.dumps(item)))
                await cast(Coroutine[Any, Any, bool], r.expire(key, int(settings.FLASH_TTL)))
                return
            except (RedisError, OSError) as e:
                logger.warning("Flash push to Redis failed: %s", e)

    stack: List[Dict[str, str]] = list(session.get(_FLASH_SESSION_KEY, []))
    stack.append(item)
    session[_FLASH_SESSION_KEY] = stack


async def flash_popall(session: Session) -> List[Dict[str, str]]:
    """Pop all flash messages (Redis first, then the session fallback)."""
    msgs: List[Dict[str, str]] = []

    if await _redis_available():
        r = _get_redis()
        if r is not None:
            key = _flash_key(session)
            try:
                while True:
                    raw = await cast(Coroutine[Any, Any, Optional[str]], r.lpop(key))
                    if raw is None:
                        break
                    try:
                        cleaned = _clean(json.loads(raw))
                    except ValueError:
                        logger.debug("Dropping malformed flash entry %r", raw)
                        continue
                    if cleaned:
                        msgs.append(cleaned)
            except (RedisError, OSError) as e:
                logger.warning("Flash pop from Redis failed: %s", e)

    stack_any = session.pop(_FLASH_SESSION_KEY, [])
    if isinstance(stack_any, list):
        for it in stack_any:
            cleaned = _clean(it)
            if cleaned:
                msgs.append(cleaned)
    return msgs


async def redirect_with_flash(
    session: Session,
    url: str,
    category: str,
    text: str,
    status_code: int = 303,
):
    """Add a flash then return a redirect response."""
    await flash_add(session, category, text)
    return RedirectResponse(url, status_code=status_code)
