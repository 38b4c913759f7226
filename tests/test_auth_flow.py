"""
tests.test_auth_flow

End-to-end account lifecycle through the HTTP surface.

Responsibilities:
- Signup -> pending -> approval -> login.
- Status re-checked on every request (blocking takes effect immediately).
- Forced password change, password recovery, logout.
"""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI
from sqlalchemy import select

from intranet_portal.db.models import AuthSession, ProfileStatus
from intranet_portal.db.repositories.profiles import ProfileRepo
from tests.helpers import USER_PASSWORD, RecordingEmailSender, bearer, create_account, login

SIGNUP = {
    "registrationCode": "TT123456",
    "name": "Carlos Pereira",
    "email": "carlos@corp.test",
    "company": "Corp",
    "phone": "(11) 98765-4321",
    "area": "Home Connect",
}


async def _profile(app: FastAPI, code: str):
    async with app.state.sessionmaker() as session:
        return await ProfileRepo(session).get_by_registration_code(code)


@pytest.mark.asyncio
async def test_signup_creates_pending_account_and_notifies_admin(
    app: FastAPI, client: httpx.AsyncClient, outbox: RecordingEmailSender
) -> None:
    r = await client.post("/v1/auth/signup", json={**SIGNUP, "status": "active"})
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "pending"
    assert "password" not in str(body).lower()

    profile = await _profile(app, "TT123456")
    assert profile.status is ProfileStatus.pending
    assert profile.phone == "11987654321"
    assert profile.area == "Home Connect"

    assert [m.to for m in outbox.sent] == ["it-admin@corp.test"]
    assert "TT123456" in outbox.sent[0].html

    r = await client.post("/v1/auth/signup", json=SIGNUP)
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


@pytest.mark.asyncio
async def test_signup_survives_notification_failure(
    app: FastAPI, client: httpx.AsyncClient, outbox: RecordingEmailSender
) -> None:
    outbox.fail_with = "smtp down"
    r = await client.post("/v1/auth/signup", json=SIGNUP)
    assert r.status_code == 201
    assert (await _profile(app, "TT123456")) is not None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "patch",
    [
        {"registrationCode": "XX123456"},
        {"phone": "1234"},
        {"area": "Marketing"},
        {"email": "not-an-email"},
    ],
)
async def test_signup_rejects_invalid_fields(client: httpx.AsyncClient, patch: dict) -> None:
    r = await client.post("/v1/auth/signup", json={**SIGNUP, **patch})
    assert r.status_code == 400
    assert "error" in r.json()


@pytest.mark.asyncio
async def test_pending_account_cannot_log_in_until_approved(
    app: FastAPI, client: httpx.AsyncClient, admin_token: str
) -> None:
    user_id = await create_account(app, code="TT200001", status=ProfileStatus.pending)

    r = await client.post(
        "/v1/auth/login", json={"registrationCode": "TT200001", "password": USER_PASSWORD}
    )
    assert r.status_code == 403
    assert r.json()["code"] == "account_pending_approval"

    r = await client.post(
        "/v1/admin/actions",
        json={"action": "set-status", "userId": str(user_id), "status": "active"},
        headers=bearer(admin_token),
    )
    assert r.status_code == 200, r.text

    token = await login(client, "TT200001", USER_PASSWORD)
    r = await client.get("/v1/me", headers=bearer(token))
    assert r.status_code == 200
    assert r.json()["profile"]["status"] == "active"


@pytest.mark.asyncio
async def test_blocking_takes_effect_on_next_request(
    app: FastAPI, client: httpx.AsyncClient, admin_token: str
) -> None:
    user_id = await create_account(app, code="TT200002", area="Gerencia")
    token = await login(client, "TT200002", USER_PASSWORD)
    assert (await client.get("/v1/dashboard", headers=bearer(token))).status_code == 200

    r = await client.post(
        "/v1/admin/actions",
        json={"action": "set-status", "userId": str(user_id), "status": "blocked"},
        headers=bearer(admin_token),
    )
    assert r.status_code == 200

    # Token is still cryptographically valid, but the status is re-read.
    r = await client.get("/v1/dashboard", headers=bearer(token))
    assert r.status_code == 403
    assert r.json()["code"] == "account_blocked"

    r = await client.post(
        "/v1/auth/login", json={"registrationCode": "TT200002", "password": USER_PASSWORD}
    )
    assert r.status_code == 403
    assert r.json()["code"] == "account_blocked"


@pytest.mark.asyncio
async def test_login_rejects_bad_credentials(app: FastAPI, client: httpx.AsyncClient) -> None:
    await create_account(app, code="TT200003")

    for code, password in (("TT200003", "wrong"), ("TT999999", USER_PASSWORD), ("bad", "x")):
        r = await client.post(
            "/v1/auth/login", json={"registrationCode": code, "password": password}
        )
        assert r.status_code == 401
        assert r.json()["code"] == "unauthenticated"


@pytest.mark.asyncio
async def test_forced_password_change_blocks_other_routes(
    app: FastAPI, client: httpx.AsyncClient
) -> None:
    await create_account(app, code="TT200004", must_change_password=True)
    r = await client.post(
        "/v1/auth/login", json={"registrationCode": "TT200004", "password": USER_PASSWORD}
    )
    assert r.json()["mustChangePassword"] is True
    token = r.json()["accessToken"]

    assert (await client.get("/v1/me", headers=bearer(token))).status_code == 200
    r = await client.get("/v1/visits", headers=bearer(token))
    assert r.status_code == 403
    assert r.json()["code"] == "password_change_required"

    r = await client.post(
        "/v1/auth/change-password",
        json={"newPassword": "Novo#2024", "confirmPassword": "Other#2024"},
        headers=bearer(token),
    )
    assert r.status_code == 400

    r = await client.post(
        "/v1/auth/change-password",
        json={"newPassword": "weak", "confirmPassword": "weak"},
        headers=bearer(token),
    )
    assert r.status_code == 400
    assert (await _profile(app, "TT200004")).must_change_password is True

    r = await client.post(
        "/v1/auth/change-password",
        json={"newPassword": "Novo#2024", "confirmPassword": "Novo#2024"},
        headers=bearer(token),
    )
    assert r.status_code == 200
    assert (await client.get("/v1/visits", headers=bearer(token))).status_code == 200

    r = await client.post(
        "/v1/auth/login", json={"registrationCode": "TT200004", "password": USER_PASSWORD}
    )
    assert r.status_code == 401
    await login(client, "TT200004", "Novo#2024")


@pytest.mark.asyncio
async def test_forgot_password_rotates_and_emails(
    app: FastAPI, client: httpx.AsyncClient, outbox: RecordingEmailSender
) -> None:
    await create_account(app, code="TT200005", email="joao@corp.test")

    r = await client.post("/v1/auth/forgot-password", json={"email": "JOAO@corp.test"})
    assert r.status_code == 200, r.text
    assert r.json() == {"success": True, "passwordRotated": True, "emailSent": True}
    assert outbox.sent[-1].to == "joao@corp.test"
    assert (await _profile(app, "TT200005")).must_change_password is True

    r = await client.post(
        "/v1/auth/login", json={"registrationCode": "TT200005", "password": USER_PASSWORD}
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_forgot_password_reports_delivery_failure_without_rollback(
    app: FastAPI, client: httpx.AsyncClient, outbox: RecordingEmailSender
) -> None:
    await create_account(app, code="TT200006", email="lia@corp.test")
    outbox.fail_with = "Email API failed [500]"

    r = await client.post("/v1/auth/forgot-password", json={"email": "lia@corp.test"})
    assert r.status_code == 200
    body = r.json()
    assert body["passwordRotated"] is True
    assert body["emailSent"] is False
    assert body["emailError"] == "Email API failed [500]"

    r = await client.post(
        "/v1/auth/login", json={"registrationCode": "TT200006", "password": USER_PASSWORD}
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_forgot_password_hides_unknown_and_ambiguous_emails(
    app: FastAPI, client: httpx.AsyncClient, outbox: RecordingEmailSender
) -> None:
    await create_account(app, code="TT200007", email="shared@corp.test")
    await create_account(app, code="TT200008", email="shared@corp.test")

    for email in ("nobody@corp.test", "shared@corp.test"):
        r = await client.post("/v1/auth/forgot-password", json={"email": email})
        assert r.status_code == 404
        assert r.json()["error"] == "Email not found"
    assert outbox.sent == []


@pytest.mark.asyncio
async def test_logout_revokes_the_session(app: FastAPI, client: httpx.AsyncClient) -> None:
    await create_account(app, code="TT200009")
    token = await login(client, "TT200009", USER_PASSWORD)

    assert (await client.post("/v1/auth/logout", headers=bearer(token))).status_code == 200
    r = await client.get("/v1/me", headers=bearer(token))
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_missing_or_garbage_token_is_unauthenticated(client: httpx.AsyncClient) -> None:
    assert (await client.get("/v1/me")).status_code == 401
    assert (await client.get("/v1/me", headers=bearer("not-a-jwt"))).status_code == 401


@pytest.mark.asyncio
async def test_signup_credential_session_is_discarded(
    app: FastAPI, client: httpx.AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    # Pin the never-returned signup credential so the provider accepts it.
    monkeypatch.setattr("intranet_portal.accounts.service.generate_password", lambda n=8: "Known#123")
    r = await client.post("/v1/auth/signup", json=SIGNUP)
    assert r.status_code == 201

    r = await client.post(
        "/v1/auth/login", json={"registrationCode": "TT123456", "password": "Known#123"}
    )
    assert r.status_code == 403
    assert r.json()["code"] == "account_pending_approval"
    assert "accessToken" not in r.json()

    async with app.state.sessionmaker() as session:
        sessions = (await session.execute(select(AuthSession))).scalars().all()
    assert len(sessions) == 1
    assert sessions[0].revoked_at is not None


@pytest.mark.asyncio
async def test_password_limit_is_counted_in_bytes(app: FastAPI, client: httpx.AsyncClient) -> None:
    await create_account(app, code="TT200010")
    token = await login(client, "TT200010", USER_PASSWORD)

    # 47 characters but 87 bytes once encoded.
    long_password = "Senha#1" + "é" * 40
    r = await client.post(
        "/v1/auth/change-password",
        json={"newPassword": long_password, "confirmPassword": long_password},
        headers=bearer(token),
    )
    assert r.status_code == 400
    assert "at most 72 bytes" in r.json()["error"]

    r = await client.post(
        "/v1/auth/login", json={"registrationCode": "TT200010", "password": "A" * 100}
    )
    assert r.status_code == 401
    assert r.json()["code"] == "unauthenticated"
