# src/store/utils/image_host.py
"""
Image hosting on Cloudinary.

Two ways in:

* ``ImageHostClient.upload_unsigned`` speaks the preset-based unsigned upload
  protocol (multipart ``file`` + ``upload_preset``), the same request a browser
  form would send. Used by the admin authoring forms.
* ``upload_signed`` / ``destroy`` go through the cloudinary SDK with the server
  credentials. Used by ``/api/upload`` and by orphan reconciliation.
"""
from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional

import cloudinary
import cloudinary.uploader
import requests

from src.store.config import settings
from src.store.utils.errors import UploadError

logger = logging.getLogger(__name__)

UPLOAD_URL_TEMPLATE = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"

ALLOWED_IMAGE_TYPES = frozenset(
    {"image/avif", "image/webp", "image/jpeg", "image/jpg", "image/png"}
)
MAX_IMAGE_SIZE_MB = 5


@dataclass(frozen=True)
class UploadResult:
    secure_url: str
    public_id: str


def check_image(
    data: bytes,
    content_type: str | None,
    *,
    allowed_types: FrozenSet[str] = ALLOWED_IMAGE_TYPES,
    max_size_mb: int = MAX_IMAGE_SIZE_MB,
) -> None:
    """Reject a file locally before anything goes over the wire."""
    if (content_type or "").lower() not in allowed_types:
        raise UploadError("Invalid file type")
    if not data:
        raise UploadError("Empty file")
    if len(data) / (1024 * 1024) > max_size_mb:
        raise UploadError(f"File exceeds max size {max_size_mb} MB")


def _json_or_empty(res: requests.Response) -> Dict[str, Any]:
    try:
        body = res.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class ImageHostClient:
    def __init__(
        self,
        cloud_name: Optional[str] = None,
        upload_preset: Optional[str] = None,
        *,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.session = session or requests.Session()
        self.timeout = timeout

    @classmethod
    def from_settings(cls, session: Optional[requests.Session] = None) -> "ImageHostClient":
        return cls(
            settings.CLOUDINARY_CLOUD_NAME or None,
            settings.CLOUDINARY_UPLOAD_PRESET or None,
            session=session,
            timeout=settings.UPLOAD_TIMEOUT_SECONDS,
        )

    @property
    def upload_url(self) -> str:
        return UPLOAD_URL_TEMPLATE.format(cloud_name=self.cloud_name)

    def upload_unsigned(self, filename: str, data: bytes, content_type: str | None) -> UploadResult:
        if not self.cloud_name or not self.upload_preset:
            raise UploadError("Missing Cloudinary environment variables")

        check_image(data, content_type)

        try:
            res = self.session.post(
                self.upload_url,
                data={"upload_preset": self.upload_preset},
                files={"file": (filename or "upload", data, content_type or "application/octet-stream")},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Image host unreachable: %s", e)
            raise UploadError(f"Image host unreachable: {e}") from e

        payload = _json_or_empty(res)
        if not res.ok:
            err = payload.get("error")
            message = err.get("message") if isinstance(err, dict) else None
            logger.warning("Image host rejected upload (%s): %s", res.status_code, message)
            raise UploadError(message or "Cloudinary upload failed")

        secure_url = payload.get("secure_url")
        if not secure_url:
            raise UploadError("Cloudinary upload failed")

        logger.info("Uploaded %s to image host as %s", filename, payload.get("public_id"))
        return UploadResult(secure_url=str(secure_url), public_id=str(payload.get("public_id") or ""))

    async def upload(self, filename: str, data: bytes, content_type: str | None) -> UploadResult:
        return await asyncio.to_thread(self.upload_unsigned, filename, data, content_type)


# ---------------------------------------------------------
# Signed operations (server credentials, cloudinary SDK)
# ---------------------------------------------------------
def configure_cloudinary() -> bool:
    if not settings.cloudinary_signed_ready:
        logger.error("Cloudinary environment variables are missing!")
        return False
    cloudinary.config(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        api_key=settings.CLOUDINARY_API_KEY,
        api_secret=settings.CLOUDINARY_API_SECRET,
        secure=True,
    )
    logger.info("Cloudinary loaded: %s", settings.CLOUDINARY_CLOUD_NAME)
    return True


async def upload_signed(data: bytes, content_type: str | None, folder: str = "uploads") -> UploadResult:
    check_image(data, content_type)
    if not settings.cloudinary_signed_ready:
        raise UploadError("Missing Cloudinary environment variables")
    try:
        result = await asyncio.to_thread(
            cloudinary.uploader.upload,
            io.BytesIO(data),
            folder=folder,
            resource_type="image",
        )
    except Exception as e:
        logger.error(f"Cloudinary upload failed: {e}")
        raise UploadError("Image upload failed") from e
    return UploadResult(secure_url=result["secure_url"], public_id=result["public_id"])


async def destroy(public_id: str) -> None:
    try:
        result = await asyncio.to_thread(
            cloudinary.uploader.destroy, public_id, resource_type="image"
        )
    except Exception as e:
        raise UploadError(f"Could not delete {public_id}: {e}") from e
    outcome = (result or {}).get("result")
    if outcome not in ("ok", "not found"):
        raise UploadError(f"Could not delete {public_id}: {outcome}")
