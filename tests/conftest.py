"""
Test configuration.

The environment is pinned before anything from `src.store` is imported: an
in-memory SQLite database (one shared connection), no Redis and no image-host
credentials.
"""
import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_URL"] = ""
os.environ["SESSION_HTTPS_ONLY"] = "false"
os.environ["TIMEZONE"] = "UTC"
os.environ["CLOUDINARY_CLOUD_NAME"] = ""
os.environ["CLOUDINARY_UPLOAD_PRESET"] = ""
os.environ["CLOUDINARY_API_KEY"] = ""
os.environ["CLOUDINARY_API_SECRET"] = ""
os.environ["API_BASE_URL"] = "http://api.test/api"

from datetime import date  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from src.store.app import app  # noqa: E402
from src.store.crud.users import create_user  # noqa: E402
from src.store.utils.auth import issue_token  # noqa: E402
from src.store.utils.database import AsyncSessionLocal, drop_models, init_models  # noqa: E402

ADMIN_EMAIL = "admin@avecatering.com"
ADMIN_PASSWORD = "admin-pass-123"
CUSTOMER_EMAIL = "jane@avecatering.com"
CUSTOMER_PASSWORD = "jane-pass-123"


@pytest.fixture(autouse=True)
async def reset_db():
    await drop_models()
    await init_models()
    yield


@pytest.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
async def admin_user():
    async with AsyncSessionLocal() as session:
        return await create_user(session, "Store Admin", ADMIN_EMAIL, ADMIN_PASSWORD, is_admin=True)


@pytest.fixture
async def customer_user():
    async with AsyncSessionLocal() as session:
        return await create_user(session, "Jane Doe", CUSTOMER_EMAIL, CUSTOMER_PASSWORD, phone="555-0101")


@pytest.fixture
def admin_headers(admin_user):
    return {"Authorization": f"Bearer {issue_token(admin_user)}"}


@pytest.fixture
def customer_headers(customer_user):
    return {"Authorization": f"Bearer {issue_token(customer_user)}"}


@pytest.fixture
def today():
    return date(2025, 6, 15)


@pytest.fixture
def banner_payload():
    """Factory for camelCase banner request bodies."""

    def make(**overrides):
        data = {
            "title": "Summer Platters",
            "subtitle": "Fresh and seasonal",
            "image": "https://res.cloudinary.com/demo/image/upload/v1/banners/summer.jpg",
            "buttonText": "Order now",
            "link": "/menu",
            "order": 0,
            "isActive": True,
        }
        data.update(overrides)
        return data

    return make
