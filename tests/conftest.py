import os
import uuid
from datetime import datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

os.environ.setdefault("SECRET_KEY", "test-secret-key-min-32-characters-long")

from fittrack.core.config import Settings, get_settings  # noqa: E402
from fittrack.core.security import create_session_token  # noqa: E402
from fittrack.db.init import init_db  # noqa: E402
from fittrack.models.user import User, UserMetadata  # noqa: E402

RAZORPAY_SECRET = "rzp_test_secret"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        secret_key="test-secret-key-min-32-characters-long",
        razorpay_key_id="rzp_test_key",
        razorpay_key_secret=RAZORPAY_SECRET,
        edamam_app_id="edamam-id",
        edamam_app_key="edamam-key",
        storage_backend="local",
        storage_local_path=str(tmp_path / "uploads"),
    )


@pytest_asyncio.fixture
async def db(settings):
    """Fresh in-memory MongoDB with every document model registered."""
    client = AsyncMongoMockClient()
    await init_db(settings, database=client[f"fittrack_test_{uuid.uuid4().hex[:8]}"])
    yield


@pytest_asyncio.fixture
async def client(db, settings) -> AsyncGenerator[AsyncClient, None]:
    from fittrack.main import app
    app.dependency_overrides[get_settings] = lambda: settings
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    async def _make(
        plan_role: str = "user",
        expiry_at: datetime | None = None,
        full_name: str = "Asha Rao",
    ) -> User:
        user = User(
            google_sub=f"sub-{uuid.uuid4().hex}",
            email=f"{uuid.uuid4().hex[:8]}@example.com",
            name=full_name,
            user_metadata=UserMetadata(
                full_name=full_name,
                plan_role=plan_role,
                signup_source=plan_role,
                expiry_at=expiry_at,
            ),
        )
        await user.insert()
        return user
    return _make


@pytest.fixture
def auth_headers(settings):
    def _headers(user: User) -> dict[str, str]:
        token = create_session_token({"user_id": str(user.id), "session_version": user.session_version}, settings)
        return {"Authorization": f"Bearer {token}"}
    return _headers

