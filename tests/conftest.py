"""Test configuration and fixtures.

Each test gets its own SQLite file under tmp_path, an AppContext built from
test settings, and an httpx client talking to the app in-process. Rate
limiting is off unless a test turns it on.
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.client.config import ClientSettings
from app.client.services import ApiClient
from app.config import Settings
from app.context import AppContext
from app.main import create_app


def make_settings(tmp_path: Path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path}/test.db",
        "redis_url": "redis://localhost:6379/15",
        "rate_limit_enabled": False,
        "seed_defaults": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest_asyncio.fixture
async def app_ctx(test_settings: Settings) -> AsyncGenerator[AppContext, None]:
    ctx = AppContext.build(test_settings)
    await ctx.start()
    yield ctx
    await ctx.close()


@pytest_asyncio.fixture
async def test_app(app_ctx: AppContext) -> FastAPI:
    app = create_app(app_ctx.settings)
    app.state.ctx = app_ctx
    return app


@pytest_asyncio.fixture
async def client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app_ctx: AppContext) -> AsyncGenerator[AsyncSession, None]:
    async with app_ctx.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def api_client(test_app: FastAPI) -> AsyncGenerator[ApiClient, None]:
    """Client-side ApiClient wired to the in-process app."""
    settings = ClientSettings(api_base_url="http://test/api", chat_reconcile_delay=0)
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url=settings.api_base_url) as http:
        yield ApiClient(settings=settings, http=http)


class RecordingSocket:
    """Stands in for a WebSocket; records every frame sent to it."""

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[Any] = []
        self.closed = False
        self.fail = fail

    async def send_json(self, data: Any, mode: str = "text") -> None:
        if self.fail:
            raise RuntimeError("socket is gone")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.closed = True


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def make_job_payload(
    uid: str = "owner-1",
    email: str | None = None,
    display_name: str = "Owner One",
    **job_fields: Any,
) -> dict:
    """Factory for the POST /api/jobs body."""
    job_data = {
        "title": "Injection mould for bottle caps",
        "category": "Moulds",
        "material": "HDPE",
        "quantity": 500,
        "budget": 150000,
        "location": "Chennai",
        "deadline": "2026-12-31",
        "description": "Two-cavity mould, hot runner preferred.",
        "requirements": {"finish": "matte"},
        "specifications": ["tolerance 0.05mm"],
        "estimatedDuration": "4 weeks",
    }
    job_data.update(job_fields)
    return {
        "jobData": job_data,
        "user": {
            "uid": uid,
            "email": email or f"{uid}@example.com",
            "displayName": display_name,
        },
    }


async def create_job(client: AsyncClient, uid: str = "owner-1", **job_fields: Any) -> int:
    resp = await client.post("/api/jobs", json=make_job_payload(uid=uid, **job_fields))
    assert resp.status_code == 200, resp.text
    return resp.json()["jobId"]


async def open_conversation(
    client: AsyncClient, job_id: int, owner_uid: str = "owner-1", participant_uid: str = "bidder-1"
) -> int:
    resp = await client.post(
        "/api/chat/conversations",
        json={
            "jobId": job_id,
            "jobOwnerUid": owner_uid,
            "participantUid": participant_uid,
            "jobTitle": "Injection mould for bottle caps",
        },
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["conversationId"]
