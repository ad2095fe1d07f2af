# src/store/services/banner_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from src.store.config import settings
from src.store.utils.errors import NetworkError, NotFoundError, ValidationError
from src.store.utils.session_context import SessionContext

logger = logging.getLogger(__name__)


class BannerApiClient:
    """Thin client of the /banners REST routes (storefront and remote admin tools)."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session_ctx: Optional[SessionContext] = None,
        http: Optional[requests.Session] = None,
        timeout: Optional[float] = 10.0,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.session_ctx = session_ctx or SessionContext()
        self.http = http or requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}/banners{path}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        headers = dict(kwargs.pop("headers", {}) or {})
        headers.update(self.session_ctx.auth_headers())
        try:
            res = self.http.request(method, self._url(path), headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

        if res.status_code == 404:
            raise NotFoundError("Banner", path.strip("/") or None)
        if res.status_code == 422:
            body = _json(res)
            errors = body.get("errors") if isinstance(body, dict) else None
            raise ValidationError(errors or {"form": "Validation error occurred"})
        if not res.ok:
            body = _json(res)
            message = body.get("message") if isinstance(body, dict) else None
            raise NetworkError(message or f"{method} {path} returned {res.status_code}")
        if res.status_code == 204 or not res.content:
            return None
        return _json(res)

    def list_public(self) -> List[Dict[str, Any]]:
        data = self._request("GET", "/public")
        return list(data or [])

    def get(self, banner_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/{banner_id}")

    def create(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "", json=payload)

    def update(self, banner_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/{banner_id}", json=payload)

    def delete(self, banner_id: int) -> None:
        self._request("DELETE", f"/{banner_id}")


def _json(res: requests.Response) -> Any:
    try:
        return res.json()
    except ValueError:
        return {}
