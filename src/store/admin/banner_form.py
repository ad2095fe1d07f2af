# src/store/admin/banner_form.py
"""
Authoring form for banners.

A controller instance backs one create or edit form. It owns an unvalidated
draft, validates it locally, pushes a freshly selected image to the image host
and only then hands the resulting URL to the banner service.

    create:  Idle -> Validating -> Submitting -> Success | Failure
    edit:    Loading -> Loaded | LoadFailure, then as create

On Failure the draft is left untouched so the user can fix things and submit
again. An image that reached the host is recorded in the upload ledger before
the record is persisted and committed afterwards; a submission that dies in
between leaves a pending ledger row for reconciliation.
"""
from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field, fields as dc_fields
from datetime import date
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from src.store.schemas.banner_schema import INVALID_DATE, check_banner_fields
from src.store.utils.errors import UploadError, ValidationError
from src.store.utils.image_host import UploadResult

logger = logging.getLogger(__name__)


class FormState(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    LOAD_FAILURE = "load_failure"
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILURE = "failure"


class BannerGateway(Protocol):
    async def get(self, banner_id: int) -> Mapping[str, Any]: ...

    async def create(self, fields: Dict[str, Any]) -> int: ...

    async def update(self, banner_id: int, fields: Dict[str, Any]) -> None: ...


class ImageUploader(Protocol):
    async def upload(self, filename: str, data: bytes, content_type: str | None) -> UploadResult: ...


class UploadRecorder(Protocol):
    async def record(self, public_id: str, secure_url: str) -> int: ...

    async def commit(self, ref: int, record_id: int) -> None: ...


@dataclass(frozen=True)
class PendingFile:
    """A file picked in the form but not uploaded yet."""
    filename: str
    content_type: str
    data: bytes = field(repr=False)

    @property
    def preview_url(self) -> str:
        return f"data:{self.content_type};base64,{base64.b64encode(self.data).decode('ascii')}"


@dataclass
class BannerDraft:
    title: str = ""
    subtitle: str = ""
    description: str = ""
    image: Union[str, PendingFile] = ""
    badge: str = ""
    link: str = ""
    button_text: str = ""
    features: str = ""
    order: str = "0"
    is_active: bool = True
    start_date: str = ""
    end_date: str = ""

    def as_form(self) -> Dict[str, Any]:
        """Template-friendly copy; a pending file shows as its name."""
        out = {f.name: getattr(self, f.name) for f in dc_fields(self)}
        if isinstance(self.image, PendingFile):
            out["image"] = self.image.filename
        return out


# form field name -> error key used by check_banner_fields
_ERROR_KEYS = {"start_date": "startDate", "end_date": "endDate", "button_text": "buttonText"}


def _error_key(name: str) -> str:
    return _ERROR_KEYS.get(name, name)


def _parse_date(text: str) -> Optional[date]:
    text = (text or "").strip()
    if not text:
        return None
    # accept full ISO timestamps, keep the calendar part
    return date.fromisoformat(text[:10])


def _date_text(value: Any) -> str:
    if not value:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def _to_int(text: Any) -> int:
    try:
        return int(str(text).strip())
    except (TypeError, ValueError):
        return 0


def _split_features(text: str) -> Optional[list[str]]:
    items = [p.strip() for p in (text or "").replace(",", "\n").splitlines()]
    items = [p for p in items if p]
    return items or None


def draft_from_record(record: Mapping[str, Any]) -> BannerDraft:
    features = record.get("features") or []
    return BannerDraft(
        title=record.get("title") or "",
        subtitle=record.get("subtitle") or "",
        description=record.get("description") or "",
        image=record.get("image") or "",
        badge=record.get("badge") or "",
        link=record.get("link") or "",
        button_text=record.get("button_text") or "",
        features="\n".join(features),
        order=str(record.get("order") or 0),
        is_active=bool(record.get("is_active", True)),
        start_date=_date_text(record.get("start_date")),
        end_date=_date_text(record.get("end_date")),
    )


class BannerFormController:
    def __init__(
        self,
        gateway: BannerGateway,
        uploader: ImageUploader,
        ledger: Optional[UploadRecorder] = None,
        banner_id: Optional[int] = None,
        draft: Optional[BannerDraft] = None,
    ):
        self.gateway = gateway
        self.uploader = uploader
        self.ledger = ledger
        self.banner_id = banner_id
        self.draft = draft or BannerDraft()
        self.errors: Dict[str, str] = {}
        self.message: Optional[str] = None
        self.preview_url: Optional[str] = None
        self.state = FormState.IDLE if banner_id is None else FormState.LOADING
        # upload of the current pending file that went through but was not
        # persisted yet; a retry reuses it instead of uploading again
        self._uploaded: Optional[tuple[PendingFile, UploadResult, Optional[int]]] = None

        if isinstance(self.draft.image, PendingFile):
            self.preview_url = self.draft.image.preview_url
        elif self.draft.image:
            self.preview_url = str(self.draft.image)

    @property
    def is_edit(self) -> bool:
        return self.banner_id is not None

    @property
    def is_editable(self) -> bool:
        return self.state in (FormState.IDLE, FormState.FAILURE)

    # ------------------------------------------------------------------
    # Load (edit only)
    # ------------------------------------------------------------------
    async def load(self) -> bool:
        if self.banner_id is None:
            return True
        self.state = FormState.LOADING
        try:
            record = await self.gateway.get(self.banner_id)
        except Exception as e:
            logger.error("Error fetching banner %s: %s", self.banner_id, e)
            self.message = "Error loading banner. Please try again."
            self.state = FormState.LOAD_FAILURE
            return False

        self.state = FormState.LOADED
        self.draft = draft_from_record(record)
        self.preview_url = str(self.draft.image) or None
        self.state = FormState.IDLE
        return True

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def set_field(self, name: str, value: Any) -> None:
        if not hasattr(self.draft, name):
            raise AttributeError(f"Unknown banner field: {name}")
        if isinstance(value, PendingFile):
            self.select_file(value.filename, value.content_type, value.data)
            return
        setattr(self.draft, name, value)
        self.errors.pop(_error_key(name), None)
        if name == "image":
            self.preview_url = str(value) or None
            self._uploaded = None
        if self.state == FormState.FAILURE:
            self.state = FormState.IDLE

    def select_file(self, filename: str, content_type: str, data: bytes) -> None:
        pending = PendingFile(filename=filename, content_type=content_type, data=data)
        self.draft.image = pending
        self.preview_url = pending.preview_url
        self.errors.pop("image", None)
        self._uploaded = None
        if self.state == FormState.FAILURE:
            self.state = FormState.IDLE

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def validate(self) -> bool:
        self.state = FormState.VALIDATING
        errors: Dict[str, str] = {}
        dates: Dict[str, Optional[date]] = {}
        for name in ("start_date", "end_date"):
            try:
                dates[name] = _parse_date(getattr(self.draft, name))
            except ValueError:
                dates[name] = None
                errors[_error_key(name)] = INVALID_DATE

        errors.update(
            check_banner_fields(
                self.draft.title,
                self.draft.image,
                dates["start_date"],
                dates["end_date"],
            )
        )
        self.errors = errors
        if errors:
            self.state = FormState.IDLE
            return False
        return True

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------
    async def submit(self) -> bool:
        if not self.is_editable:
            raise RuntimeError(f"Cannot submit a form in state {self.state.value}")
        self.message = None
        if not self.validate():
            return False

        self.state = FormState.SUBMITTING
        try:
            image_url, ledger_ref = await self._resolve_image()
            values = self._values(image_url)
            if self.banner_id is None:
                record_id = await self.gateway.create(values)
            else:
                await self.gateway.update(self.banner_id, values)
                record_id = self.banner_id
        except UploadError as e:
            logger.warning("Banner image upload failed: %s", e)
            return self._fail(str(e) or "Image upload failed")
        except ValidationError as e:
            self.errors.update(e.errors)
            return self._fail("Please correct the highlighted fields.")
        except Exception as e:
            logger.error("Error saving banner: %s", e)
            verb = "update" if self.is_edit else "create"
            return self._fail(f"Failed to {verb} banner")

        if ledger_ref is not None and self.ledger is not None:
            try:
                await self.ledger.commit(ledger_ref, record_id)
            except Exception as e:
                # record is saved; the row just stays pending until reconciled
                logger.error("Could not commit upload %s: %s", ledger_ref, e)

        self.message = "Banner updated successfully!" if self.is_edit else "Banner created successfully!"
        self._uploaded = None
        self.banner_id = record_id
        self.state = FormState.SUCCESS
        return True

    async def _resolve_image(self) -> tuple[str, Optional[int]]:
        image = self.draft.image
        if not isinstance(image, PendingFile):
            return str(image), None

        if self._uploaded is not None and self._uploaded[0] is image:
            _, result, ref = self._uploaded
            return result.secure_url, ref

        result = await self.uploader.upload(image.filename, image.data, image.content_type)
        ref = None
        if self.ledger is not None:
            ref = await self.ledger.record(result.public_id, result.secure_url)
        self._uploaded = (image, result, ref)
        return result.secure_url, ref

    def _values(self, image_url: str) -> Dict[str, Any]:
        d = self.draft
        return {
            "title": d.title.strip(),
            "subtitle": d.subtitle.strip() or None,
            "description": d.description.strip() or None,
            "image": image_url,
            "badge": d.badge.strip() or None,
            "link": d.link.strip() or None,
            "button_text": d.button_text.strip() or None,
            "features": _split_features(d.features),
            "order": _to_int(d.order),
            "is_active": bool(d.is_active),
            "start_date": _parse_date(d.start_date),
            "end_date": _parse_date(d.end_date),
        }

    def _fail(self, message: str) -> bool:
        self.message = message
        self.state = FormState.FAILURE
        return False
