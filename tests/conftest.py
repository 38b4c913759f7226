"""
tests.conftest

Shared fixtures: an app running its lifespan against a per-test SQLite file,
an in-process HTTP client and a recording email sender.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from intranet_portal.api.app import create_app
from intranet_portal.db.models import AppRole
from intranet_portal.settings import Settings
from tests.helpers import ADMIN_CODE, ADMIN_PASSWORD, RecordingEmailSender, create_account, login


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'portal.db'}",
        jwt_secret="test-secret",
        admin_notify_email="it-admin@corp.test",
        resend_api_key=None,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    # httpx ASGITransport does not manage lifespan; run it explicitly.
    async with app.router.lifespan_context(app):
        app.state.email = RecordingEmailSender()
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def outbox(app: FastAPI) -> RecordingEmailSender:
    return app.state.email


@pytest_asyncio.fixture
async def admin_token(app: FastAPI, client: httpx.AsyncClient) -> str:
    await create_account(
        app,
        code=ADMIN_CODE,
        password=ADMIN_PASSWORD,
        name="Ana Admin",
        email="ana@corp.test",
        roles=(AppRole.admin, AppRole.user),
    )
    return await login(client, ADMIN_CODE, ADMIN_PASSWORD)
