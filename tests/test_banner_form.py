from datetime import date

import pytest

from src.store.admin.banner_form import (
    BannerDraft,
    BannerFormController,
    FormState,
    PendingFile,
    draft_from_record,
)
from src.store.utils.errors import NotFoundError, UploadError, ValidationError
from src.store.utils.image_host import UploadResult

PNG = b"\x89PNG\r\n\x1a\nfake"
HOSTED = "https://res.cloudinary.com/demo/image/upload/v1/banners/new.png"


class FakeGateway:
    def __init__(self, record=None, fail_with=None):
        self.record = record
        self.fail_with = fail_with
        self.created = []
        self.updated = []
        self.get_calls = 0

    async def get(self, banner_id):
        self.get_calls += 1
        if self.record is None:
            raise NotFoundError("Banner", banner_id)
        return self.record

    async def create(self, fields):
        if self.fail_with:
            raise self.fail_with
        self.created.append(fields)
        return 41

    async def update(self, banner_id, fields):
        if self.fail_with:
            raise self.fail_with
        self.updated.append((banner_id, fields))


class FakeUploader:
    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.calls = []

    async def upload(self, filename, data, content_type):
        self.calls.append((filename, data, content_type))
        if self.fail_with:
            raise self.fail_with
        return UploadResult(secure_url=HOSTED, public_id="banners/new")


class FakeLedger:
    def __init__(self):
        self.recorded = []
        self.committed = []

    async def record(self, public_id, secure_url):
        self.recorded.append((public_id, secure_url))
        return len(self.recorded)

    async def commit(self, ref, record_id):
        self.committed.append((ref, record_id))


def _filled(controller):
    controller.set_field("title", "Catering for 50")
    controller.set_field("subtitle", "Weddings and events")
    controller.set_field("features", "Halal\nFree delivery")
    controller.set_field("order", "2")
    controller.set_field("start_date", "2025-07-01")
    controller.set_field("end_date", "2025-07-31")
    controller.select_file("hero.png", "image/png", PNG)
    return controller


async def test_create_uploads_then_persists():
    gateway, uploader, ledger = FakeGateway(), FakeUploader(), FakeLedger()
    form = _filled(BannerFormController(gateway, uploader, ledger))
    assert form.state == FormState.IDLE
    assert form.preview_url.startswith("data:image/png;base64,")

    assert await form.submit() is True

    assert form.state == FormState.SUCCESS
    assert form.message == "Banner created successfully!"
    assert uploader.calls == [("hero.png", PNG, "image/png")]
    [fields] = gateway.created
    assert fields["image"] == HOSTED
    assert fields["order"] == 2
    assert fields["features"] == ["Halal", "Free delivery"]
    assert fields["start_date"] == date(2025, 7, 1)
    assert fields["end_date"] == date(2025, 7, 31)
    assert ledger.recorded == [("banners/new", HOSTED)]
    assert ledger.committed == [(1, 41)]
    assert form.banner_id == 41


async def test_local_validation_never_reaches_the_network():
    gateway, uploader = FakeGateway(), FakeUploader()
    form = BannerFormController(gateway, uploader)
    form.set_field("end_date", "2025-01-01")
    form.set_field("start_date", "2025-02-01")

    assert await form.submit() is False

    assert form.state == FormState.IDLE
    assert form.errors == {
        "title": "Title is required",
        "image": "Image is required",
        "endDate": "End date must be after start date",
    }
    assert uploader.calls == []
    assert gateway.created == []


async def test_unparseable_date_is_a_field_error():
    form = BannerFormController(FakeGateway(), FakeUploader())
    form.set_field("title", "T")
    form.set_field("image", HOSTED)
    form.set_field("start_date", "next tuesday")

    assert form.validate() is False
    assert form.errors == {"startDate": "Invalid date"}


async def test_editing_a_field_clears_its_error():
    form = BannerFormController(FakeGateway(), FakeUploader())
    form.validate()
    assert "title" in form.errors

    form.set_field("title", "Now filled")
    assert "title" not in form.errors
    assert "image" in form.errors


async def test_upload_failure_keeps_the_draft_and_skips_the_service():
    gateway = FakeGateway()
    uploader = FakeUploader(fail_with=UploadError("Upload preset not found"))
    form = _filled(BannerFormController(gateway, uploader, FakeLedger()))
    draft_before = BannerDraft(**vars(form.draft))

    assert await form.submit() is False

    assert form.state == FormState.FAILURE
    assert form.message == "Upload preset not found"
    assert gateway.created == []
    assert vars(form.draft) == vars(draft_before)
    assert isinstance(form.draft.image, PendingFile)
    assert form.is_editable


async def test_service_failure_then_retry_reuses_the_upload():
    gateway = FakeGateway(fail_with=RuntimeError("db down"))
    uploader, ledger = FakeUploader(), FakeLedger()
    form = _filled(BannerFormController(gateway, uploader, ledger))

    assert await form.submit() is False
    assert form.state == FormState.FAILURE
    assert form.message == "Failed to create banner"
    assert ledger.committed == []

    gateway.fail_with = None
    assert await form.submit() is True
    assert len(uploader.calls) == 1
    assert len(ledger.recorded) == 1
    assert ledger.committed == [(1, 41)]


async def test_service_validation_errors_are_shown_on_fields():
    gateway = FakeGateway(fail_with=ValidationError({"endDate": "End date must be after start date"}))
    form = BannerFormController(gateway, FakeUploader())
    form.set_field("title", "T")
    form.set_field("image", HOSTED)

    assert await form.submit() is False
    assert form.state == FormState.FAILURE
    assert form.errors["endDate"] == "End date must be after start date"


async def test_edit_loads_the_record_as_text():
    record = {
        "id": 7,
        "title": "Iftar Boxes",
        "image": HOSTED,
        "order": 4,
        "is_active": False,
        "features": ["Dates", "Soup"],
        "start_date": date(2025, 3, 1),
        "end_date": "2025-03-30T00:00:00Z",
    }
    gateway = FakeGateway(record=record)
    form = BannerFormController(gateway, FakeUploader(), banner_id=7)
    assert form.state == FormState.LOADING
    assert not form.is_editable

    assert await form.load() is True

    assert form.state == FormState.IDLE
    assert form.draft.title == "Iftar Boxes"
    assert form.draft.order == "4"
    assert form.draft.is_active is False
    assert form.draft.features == "Dates\nSoup"
    assert form.draft.start_date == "2025-03-01"
    assert form.draft.end_date == "2025-03-30"
    assert form.preview_url == HOSTED


async def test_edit_submit_keeps_hosted_image_and_updates():
    gateway = FakeGateway(record={"title": "Old", "image": HOSTED})
    uploader = FakeUploader()
    form = BannerFormController(gateway, uploader, banner_id=7)
    await form.load()
    form.set_field("title", "New")

    assert await form.submit() is True

    assert form.message == "Banner updated successfully!"
    assert uploader.calls == []
    [(banner_id, fields)] = gateway.updated
    assert banner_id == 7
    assert fields["title"] == "New"
    assert fields["image"] == HOSTED


async def test_edit_load_failure():
    form = BannerFormController(FakeGateway(record=None), FakeUploader(), banner_id=3)

    assert await form.load() is False
    assert form.state == FormState.LOAD_FAILURE
    assert form.message == "Error loading banner. Please try again."


async def test_cannot_submit_before_load():
    form = BannerFormController(FakeGateway(record={}), FakeUploader(), banner_id=3)
    with pytest.raises(RuntimeError):
        await form.submit()


def test_draft_from_record_handles_missing_values():
    draft = draft_from_record({"title": None, "image": None})
    assert draft.title == ""
    assert draft.order == "0"
    assert draft.start_date == ""
    assert draft.is_active is True


def test_as_form_shows_pending_file_name():
    draft = BannerDraft(title="x", image=PendingFile("pic.webp", "image/webp", b"..."))
    assert draft.as_form()["image"] == "pic.webp"
