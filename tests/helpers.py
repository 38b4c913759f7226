"""
tests.helpers

Account helpers and fakes shared across the API tests.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field

import httpx
from fastapi import FastAPI

from intranet_portal.db.models import AppRole, ProfileStatus
from intranet_portal.db.repositories.profiles import ProfileRepo
from intranet_portal.db.repositories.roles import RoleRepo
from intranet_portal.notifications.email import EmailDeliveryError
from intranet_portal.settings import Settings

ADMIN_CODE = "TT000001"
ADMIN_PASSWORD = "Admin#2024"
USER_PASSWORD = "User#2024x"


@dataclass
class SentEmail:
    to: str
    subject: str
    html: str


@dataclass
class RecordingEmailSender:
    sent: list[SentEmail] = field(default_factory=list)
    fail_with: str | None = None

    async def send(self, *, to: str, subject: str, html: str) -> None:
        if self.fail_with is not None:
            raise EmailDeliveryError(self.fail_with)
        self.sent.append(SentEmail(to=to, subject=subject, html=html))


async def create_account(
    app: FastAPI,
    *,
    code: str,
    password: str = USER_PASSWORD,
    name: str = "Maria Silva",
    email: str | None = None,
    area: str | None = None,
    status: ProfileStatus = ProfileStatus.active,
    roles: Iterable[AppRole] = (AppRole.user,),
    must_change_password: bool = False,
) -> uuid.UUID:
    settings: Settings = app.state.settings
    user_id = await app.state.identity.admin_create_identity(
        f"{code.lower()}@{settings.login_email_domain}", password, {"name": name}
    )
    async with app.state.sessionmaker() as session:
        await ProfileRepo(session).create(
            user_id=user_id,
            registration_code=code,
            name=name,
            email=email,
            company="Corp",
            phone="11999998888",
            area=area,
            status=status,
            must_change_password=must_change_password,
        )
        for role in roles:
            await RoleRepo(session).grant(user_id, role)
        await session.commit()
    return user_id


async def login(client: httpx.AsyncClient, code: str, password: str) -> str:
    r = await client.post("/v1/auth/login", json={"registrationCode": code, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["accessToken"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
