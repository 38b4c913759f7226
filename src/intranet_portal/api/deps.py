"""
intranet_portal.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and DB sessions.
- Expose the shared collaborators created at startup (identity provider, email sender).
- Encapsulate app.state access patterns.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from intranet_portal.auth.identity import IdentityProvider
from intranet_portal.notifications.email import EmailSender
from intranet_portal.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The app factory pins its Settings instance on app.state.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created in the lifespan of `intranet_portal.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity  # type: ignore[attr-defined]


def email_sender(request: Request) -> EmailSender:
    return request.app.state.email  # type: ignore[attr-defined]


# --- Module Notes -----------------------------------------------------------
# Tests replace `app.state.identity` / `app.state.email` with fakes after startup;
# routers always resolve collaborators through these functions.
