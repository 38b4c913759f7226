from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.api.deps import db_session
from intranet_portal.api.schemas import ApiModel, ReportOut
from intranet_portal.auth.deps import require_admin
from intranet_portal.auth.models import AccessContext
from intranet_portal.db.repositories.report_links import ReportLinkRepo
from intranet_portal.errors import NotFound

router = APIRouter(prefix="/v1/admin/reports", tags=["admin"])


class ReportCreate(ApiModel):
    title: str = Field(min_length=1, max_length=256)
    url: str = Field(min_length=1)
    description: str | None = None
    icon: str | None = Field(default=None, max_length=64)
    order: int = 0
    active: bool = True


class ReportPatch(ApiModel):
    title: str | None = Field(default=None, min_length=1, max_length=256)
    url: str | None = Field(default=None, min_length=1)
    description: str | None = None
    icon: str | None = Field(default=None, max_length=64)
    order: int | None = None
    active: bool | None = None


@router.get("", response_model=list[ReportOut])
async def list_all_reports(
    _: AccessContext = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> list[ReportOut]:
    # Management listing: inactive links included.
    return [ReportOut.from_row(r) for r in await ReportLinkRepo(session).list_all()]


@router.post("", status_code=201, response_model=ReportOut)
async def create_report(
    body: ReportCreate,
    _: AccessContext = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> ReportOut:
    link = await ReportLinkRepo(session).create(**body.model_dump())
    await session.commit()
    return ReportOut.from_row(link)


@router.patch("/{report_id}", response_model=ReportOut)
async def update_report(
    report_id: uuid.UUID,
    body: ReportPatch,
    _: AccessContext = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> ReportOut:
    repo = ReportLinkRepo(session)
    link = await repo.get(report_id)
    if link is None:
        raise NotFound("Report not found")
    fields = body.model_dump(exclude_unset=True)
    # Only description and icon may be cleared; null elsewhere means "unchanged".
    fields = {k: v for k, v in fields.items() if v is not None or k in ("description", "icon")}
    link = await repo.patch(link, fields)
    await session.commit()
    return ReportOut.from_row(link)


@router.delete("/{report_id}")
async def delete_report(
    report_id: uuid.UUID,
    _: AccessContext = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> dict[str, bool]:
    repo = ReportLinkRepo(session)
    link = await repo.get(report_id)
    if link is None:
        raise NotFound("Report not found")
    await repo.delete(link)
    await session.commit()
    return {"success": True}
