# src/store/middleware/cors.py
import logging
from typing import Iterable

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization"]


def install_cors(app: FastAPI, origins: Iterable[str]) -> None:
    """
    Credentialed CORS restricted to `origins`.

    Requests without an Origin header (curl, server-to-server, same-origin
    navigation) pass untouched. A disallowed origin gets no CORS headers and
    is logged; the request itself is still served.
    """
    allowed = frozenset(o.rstrip("/") for o in origins if o)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=sorted(allowed),
        allow_credentials=True,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
    )

    # registered after CORSMiddleware so it runs outside of it
    @app.middleware("http")
    async def log_blocked_origins(request: Request, call_next):
        origin = request.headers.get("origin")
        if origin and origin.rstrip("/") not in allowed:
            logger.warning("CORS blocked origin: %s (%s %s)", origin, request.method, request.url.path)
        return await call_next(request)
