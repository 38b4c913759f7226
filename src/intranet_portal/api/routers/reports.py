"""
intranet_portal.api.routers.reports

Serving routes for the dashboard and embedded report links.

Responsibilities:
- Gate each route on its module (`dashboard`, `powerbi`).
- Return only the report links the caller's area (or admin role) allows.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.api.deps import db_session
from intranet_portal.api.schemas import ReportOut
from intranet_portal.auth.deps import require_module
from intranet_portal.auth.models import AccessContext
from intranet_portal.db.repositories.profiles import ProfileRepo
from intranet_portal.db.repositories.report_links import ReportLinkRepo
from intranet_portal.policy.catalog import Module
from intranet_portal.policy.engine import report_access, visible_reports

router = APIRouter(prefix="/v1", tags=["reports"])


@router.get("/dashboard")
async def dashboard(
    ctx: AccessContext = Depends(require_module(Module.dashboard)),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    profile = await ProfileRepo(session).get_by_user_id(ctx.user_id)
    reports = visible_reports(ctx, await ReportLinkRepo(session).list_all())
    return {
        "greeting": profile.name.split(" ")[0] if profile and profile.name else None,
        "reports": [ReportOut.from_row(r).model_dump(mode="json", by_alias=True) for r in reports],
    }


@router.get("/reports", response_model=list[ReportOut])
async def list_reports(
    ctx: AccessContext = Depends(require_module(Module.powerbi)),
    session: AsyncSession = Depends(db_session),
) -> list[ReportOut]:
    reports = visible_reports(ctx, await ReportLinkRepo(session).list_all())
    return [ReportOut.from_row(r) for r in reports]


@router.get("/reports/{report_id}", response_model=ReportOut)
async def get_report(
    report_id: uuid.UUID,
    ctx: AccessContext = Depends(require_module(Module.powerbi)),
    session: AsyncSession = Depends(db_session),
) -> ReportOut:
    report = report_access(ctx, report_id, await ReportLinkRepo(session).list_all())
    return ReportOut.from_row(report)
