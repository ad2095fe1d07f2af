# src/store/schemas/banner_schema.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import field_validator

from src.store.schemas.common import CamelModel, CamelOut, blank_to_none as _blank_to_none

TITLE_REQUIRED = "Title is required"
IMAGE_REQUIRED = "Image is required"
END_BEFORE_START = "End date must be after start date"
INVALID_DATE = "Invalid date"


def check_banner_fields(
    title: Optional[str],
    image: Any,
    start_date: Optional[date],
    end_date: Optional[date],
) -> Dict[str, str]:
    """
    Field errors for a banner draft or payload; empty dict means valid.
    `image` may be a URL string or a pending local file, anything truthy counts.
    """
    errors: Dict[str, str] = {}
    if not (title or "").strip():
        errors["title"] = TITLE_REQUIRED
    if not image:
        errors["image"] = IMAGE_REQUIRED
    if start_date is not None and end_date is not None and start_date >= end_date:
        errors["endDate"] = END_BEFORE_START
    return errors


class BannerCreate(CamelModel):
    # title/image are checked by check_banner_fields so the caller gets
    # field-level messages instead of a generic 422
    title: str = ""
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image: str = ""
    badge: Optional[str] = None
    link: Optional[str] = None
    button_text: Optional[str] = None
    features: Optional[List[str]] = None
    order: int = 0
    is_active: bool = True
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator(
        "subtitle", "description", "badge", "link", "button_text", "start_date", "end_date",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator("order", mode="before")
    @classmethod
    def v_order_before(cls, v):
        v = _blank_to_none(v)
        return 0 if v is None else v


class BannerUpdate(CamelModel):
    """All optional; unset fields keep the stored value."""
    title: Optional[str] = None
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    badge: Optional[str] = None
    link: Optional[str] = None
    button_text: Optional[str] = None
    features: Optional[List[str]] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        return _blank_to_none(v)


class BannerOut(CamelOut):
    id: int
    title: str
    subtitle: Optional[str] = None
    description: Optional[str] = None
    image: str
    badge: Optional[str] = None
    link: Optional[str] = None
    button_text: Optional[str] = None
    features: Optional[List[str]] = None
    order: int = 0
    is_active: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None
