# backend/wellness/tests/conftest.py
"""
Fixtures and helpers for end-to-end tests with FastAPI + pytest-asyncio.
Mongo is replaced by mongomock; each lifespan gets a fresh in-memory database.
The client library talks to the same ASGI app through httpx transports.
"""
import os
import sys
import uuid
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from asgi_lifespan import LifespanManager

# ---- unique test DB per run (must be set BEFORE importing wellness.main) ----
TEST_DB_NAME = f"wellness_test_{uuid.uuid4().hex[:8]}"
os.environ.setdefault("MONGO_DB", TEST_DB_NAME)
os.environ.setdefault("JWT_SECRET", "test-secret")

# ---- absolute imports 'wellness.*' without an installed package ----
ROOT_DIR = Path(__file__).resolve().parents[1]   # .../backend/wellness
sys.path.insert(0, str(ROOT_DIR.parent))         # .../backend

import mongomock  # noqa: E402
from wellness.db import mongo as mongo_module  # noqa: E402

mongo_module.MongoClient = mongomock.MongoClient

from wellness.main import app  # noqa: E402
from wellness.client.api import WellnessApiClient  # noqa: E402
from wellness.client.credentials import StaticCredentials  # noqa: E402
from wellness.models.assessment import AssessmentSubmission, GeneralRegion  # noqa: E402

BASE_URL = "http://testserver/api"


@pytest_asyncio.fixture
async def app_transport():
    async with LifespanManager(app):
        yield ASGITransport(app=app)


@pytest_asyncio.fixture
async def async_client(app_transport):
    async with AsyncClient(transport=app_transport, base_url="http://testserver") as client:
        yield client


# -------- Helpers --------
async def _register(client: AsyncClient) -> dict:
    email = f"test_{uuid.uuid4().hex[:8]}@example.com"
    r = await client.post("/api/auth/register", json={"email": email, "password": "Secreta123"})
    assert r.status_code == 201, r.text
    body = r.json()
    return {
        "email": email,
        "token": body["token"],
        "user_id": body["user"]["id"],
        "headers": {"Authorization": f"Bearer {body['token']}"},
    }


@pytest_asyncio.fixture
async def user_auth(async_client: AsyncClient):
    return await _register(async_client)


@pytest_asyncio.fixture
async def other_user_auth(async_client: AsyncClient):
    return await _register(async_client)


class SwitchableTransport(httpx.AsyncBaseTransport):
    """
    Wraps the ASGI transport. While `offline` is set every request fails the
    way an unreachable server does; `fail_at` makes the n-th request (1-based)
    fail that way once.
    """

    def __init__(self, inner: httpx.AsyncBaseTransport) -> None:
        self.inner = inner
        self.offline = False
        self.fail_at: set[int] = set()
        self.requests: list[httpx.Request] = []

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline or len(self.requests) in self.fail_at:
            raise httpx.ConnectError("connection refused", request=request)
        return await self.inner.handle_async_request(request)


@pytest.fixture
def switchable_transport(app_transport):
    return SwitchableTransport(app_transport)


@pytest_asyncio.fixture
async def api_client(user_auth, switchable_transport):
    client = WellnessApiClient(
        BASE_URL,
        StaticCredentials(user_auth["token"]),
        transport=switchable_transport,
    )
    yield client
    await client.aclose()


def make_submission(stage: str = "Postpartum", region: str = "North", sleep_hours: float = 6, **answers: bool):
    """All nine questions answered False unless overridden."""
    responses = {f"q{i}": False for i in range(1, 10)}
    responses.update(answers)
    return AssessmentSubmission(
        stage=stage,
        region=GeneralRegion(name=region),
        sleep_hours=sleep_hours,
        responses=responses,
    )


@pytest.fixture
def submission_factory():
    return make_submission
