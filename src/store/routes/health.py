# src/store/routes/health.py
import time

from fastapi import APIRouter

from src.store.config import settings
from src.store.utils.timezone import now_iso

router = APIRouter(tags=["Health"])

STARTED_AT = time.monotonic()


@router.get("/health")
async def health():
    return {
        "status": "OK",
        "timestamp": now_iso(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "environment": settings.ENVIRONMENT,
    }
