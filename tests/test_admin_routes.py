from __future__ import annotations

import uuid

import httpx
import pytest
from fastapi import FastAPI
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.db.models import ProfileStatus, UserPresence
from intranet_portal.db.repositories.activity import ActivityRepo
from tests.helpers import USER_PASSWORD, bearer, create_account, login


async def _report(client: httpx.AsyncClient, token: str, **fields) -> dict:
    r = await client.post("/v1/admin/reports", json=fields, headers=bearer(token))
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_admin_routes_require_admin(app: FastAPI, client: httpx.AsyncClient) -> None:
    await create_account(app, code="TT400001", area="Gerencia")
    token = await login(client, "TT400001", USER_PASSWORD)

    for path in ("/v1/admin/users", "/v1/admin/permissions", "/v1/admin/reports", "/v1/admin/analytics"):
        r = await client.get(path, headers=bearer(token))
        assert r.status_code == 403, path


@pytest.mark.asyncio
async def test_list_users_newest_first_with_admin_flag(
    app: FastAPI, client: httpx.AsyncClient, admin_token: str
) -> None:
    await create_account(app, code="TT400002", status=ProfileStatus.pending)

    r = await client.get("/v1/admin/users", headers=bearer(admin_token))
    assert r.status_code == 200
    users = r.json()
    assert [u["registrationCode"] for u in users] == ["TT400002", "TT000001"]
    assert [u["isAdmin"] for u in users] == [False, True]
    assert users[0]["status"] == "pending"


@pytest.mark.asyncio
async def test_permissions_defaults_and_upsert(
    client: httpx.AsyncClient, admin_token: str
) -> None:
    r = await client.get("/v1/admin/permissions", headers=bearer(admin_token))
    assert r.status_code == 200
    by_area = {p["area"]: p for p in r.json()}
    assert set(by_area) == {"Comunicação de Dados", "Home Connect", "Suporte CL", "Gerencia"}
    assert by_area["Gerencia"]["allAccess"] is True
    assert by_area["Gerencia"]["modules"] == ["dashboard", "powerbi"]
    assert by_area["Suporte CL"] == {
        "area": "Suporte CL",
        "modules": [],
        "reportIds": [],
        "allAccess": False,
    }

    r = await client.put(
        "/v1/admin/permissions",
        json=[
            {"area": "Suporte CL", "modules": ["powerbi"], "reportIds": ["a", "a", "b"]},
            {"area": "Home Connect", "modules": [], "allAccess": True},
        ],
        headers=bearer(admin_token),
    )
    assert r.status_code == 200, r.text
    out = {p["area"]: p for p in r.json()}
    assert out["Suporte CL"]["modules"] == ["powerbi"]
    assert out["Suporte CL"]["reportIds"] == ["a", "b"]
    assert out["Home Connect"]["modules"] == ["dashboard", "powerbi"]

    r = await client.put(
        "/v1/admin/permissions",
        json=[{"area": "Marketing", "modules": []}],
        headers=bearer(admin_token),
    )
    assert r.status_code == 400

    r = await client.put(
        "/v1/admin/permissions",
        json=[{"area": "Suporte CL", "modules": ["crm"]}],
        headers=bearer(admin_token),
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_reports_served_by_area_permission(
    app: FastAPI, client: httpx.AsyncClient, admin_token: str
) -> None:
    r1 = await _report(client, admin_token, title="Vendas", url="https://bi/1", order=2)
    r2 = await _report(client, admin_token, title="Churn", url="https://bi/2", order=1)
    r3 = await _report(client, admin_token, title="Antigo", url="https://bi/3", active=False)

    await client.put(
        "/v1/admin/permissions",
        json=[
            {
                "area": "Home Connect",
                "modules": ["powerbi"],
                "reportIds": [r1["id"], r3["id"]],
            }
        ],
        headers=bearer(admin_token),
    )
    await create_account(app, code="TT400003", area="Home Connect")
    token = await login(client, "TT400003", USER_PASSWORD)

    r = await client.get("/v1/reports", headers=bearer(token))
    assert r.status_code == 200
    assert [x["id"] for x in r.json()] == [r1["id"]]

    assert (await client.get(f"/v1/reports/{r1['id']}", headers=bearer(token))).status_code == 200
    assert (await client.get(f"/v1/reports/{r2['id']}", headers=bearer(token))).status_code == 403
    assert (await client.get(f"/v1/reports/{r3['id']}", headers=bearer(token))).status_code == 404

    r = await client.get("/v1/dashboard", headers=bearer(token))
    assert r.status_code == 403

    r = await client.get("/v1/me", headers=bearer(token))
    assert r.json()["modules"] == ["powerbi"]

    # Admin: every active report, ordered; management listing keeps inactive ones.
    r = await client.get("/v1/reports", headers=bearer(admin_token))
    assert [x["id"] for x in r.json()] == [r2["id"], r1["id"]]
    r = await client.get("/v1/admin/reports", headers=bearer(admin_token))
    assert {x["id"] for x in r.json()} == {r1["id"], r2["id"], r3["id"]}


@pytest.mark.asyncio
async def test_user_without_area_sees_nothing(app: FastAPI, client: httpx.AsyncClient) -> None:
    await create_account(app, code="TT400004", area=None)
    token = await login(client, "TT400004", USER_PASSWORD)

    assert (await client.get("/v1/reports", headers=bearer(token))).status_code == 403
    assert (await client.get("/v1/dashboard", headers=bearer(token))).status_code == 403
    assert (await client.get("/v1/me", headers=bearer(token))).json()["modules"] == []


@pytest.mark.asyncio
async def test_report_crud(client: httpx.AsyncClient, admin_token: str) -> None:
    rep = await _report(client, admin_token, title="Ops", url="https://bi/ops", icon="chart")

    r = await client.patch(
        f"/v1/admin/reports/{rep['id']}",
        json={"active": False, "description": "old", "title": None},
        headers=bearer(admin_token),
    )
    assert r.status_code == 200
    assert r.json()["active"] is False
    assert r.json()["description"] == "old"
    assert r.json()["title"] == "Ops"

    r = await client.delete(f"/v1/admin/reports/{rep['id']}", headers=bearer(admin_token))
    assert r.status_code == 200
    r = await client.delete(f"/v1/admin/reports/{rep['id']}", headers=bearer(admin_token))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_analytics_aggregates_activity(
    app: FastAPI, client: httpx.AsyncClient, admin_token: str
) -> None:
    await create_account(app, code="TT400005", name="Paulo Lima", area="Gerencia")
    token = await login(client, "TT400005", USER_PASSWORD)

    for page in ("/dashboard", "/powerbi"):
        r = await client.post("/v1/activity/log", json={"page": page}, headers=bearer(token))
        assert r.status_code == 201
    r = await client.post("/v1/activity/heartbeat", json={"page": "/powerbi"}, headers=bearer(token))
    assert r.status_code == 200

    r = await client.get("/v1/admin/analytics", headers=bearer(admin_token))
    assert r.status_code == 200
    data = r.json()
    assert [e["page"] for e in data["recentLogs"]] == ["/powerbi", "/dashboard"]
    assert [u["currentPage"] for u in data["onlineUsers"]] == ["/powerbi"]
    assert len(data["dailyAccess"]) == 7
    assert data["dailyAccess"][-1]["count"] == 2
    assert sum(d["count"] for d in data["dailyAccess"]) == 2
    user_id = data["onlineUsers"][0]["userId"]
    assert data["profiles"][user_id] == {"name": "Paulo Lima", "registrationCode": "TT400005"}


@pytest.mark.asyncio
async def test_all_access_area_ignores_report_list(
    app: FastAPI, client: httpx.AsyncClient, admin_token: str
) -> None:
    listed = await _report(client, admin_token, title="Listed", url="https://bi/l")
    unlisted = await _report(client, admin_token, title="Unlisted", url="https://bi/u")
    await client.put(
        "/v1/admin/permissions",
        json=[{"area": "Gerencia", "modules": [], "reportIds": [listed["id"]], "allAccess": True}],
        headers=bearer(admin_token),
    )
    await create_account(app, code="TT400006", area="Gerencia")
    token = await login(client, "TT400006", USER_PASSWORD)

    r = await client.get(f"/v1/reports/{unlisted['id']}", headers=bearer(token))
    assert r.status_code == 200
    assert (await client.get("/v1/dashboard", headers=bearer(token))).status_code == 200


@pytest.mark.asyncio
async def test_first_heartbeat_race_falls_back_to_update(
    app: FastAPI, monkeypatch: pytest.MonkeyPatch
) -> None:
    user_id = uuid.uuid4()
    async with app.state.sessionmaker() as other:
        await ActivityRepo(other).heartbeat(user_id=user_id, page="/dashboard")
        await other.commit()

    # The second tab read "no row" before the first tab's insert committed.
    real_get = AsyncSession.get
    calls: list[object] = []

    async def stale_get(self, entity, ident, **kwargs):
        calls.append(ident)
        if len(calls) == 1:
            return None
        return await real_get(self, entity, ident, **kwargs)

    monkeypatch.setattr(AsyncSession, "get", stale_get)
    async with app.state.sessionmaker() as session:
        row = await ActivityRepo(session).heartbeat(user_id=user_id, page="/powerbi")
        await session.commit()
    monkeypatch.undo()

    assert row.current_page == "/powerbi"
    assert len(calls) == 2
    async with app.state.sessionmaker() as session:
        rows = (await session.execute(select(UserPresence))).scalars().all()
    assert [(r.user_id, r.current_page) for r in rows] == [(user_id, "/powerbi")]
