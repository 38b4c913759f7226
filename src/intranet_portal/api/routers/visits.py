"""
intranet_portal.api.routers.visits

Field visit log for supervisors.

Responsibilities:
- Record a completed visit with place, date, notes and a signature image.
- List the caller's own visits, newest visit date first.
"""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from pydantic import Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.api.deps import db_session
from intranet_portal.api.schemas import ApiModel, VisitOut
from intranet_portal.auth.deps import require_active
from intranet_portal.auth.models import AccessContext
from intranet_portal.db.repositories.visits import VisitRepo

router = APIRouter(prefix="/v1/visits", tags=["visits"])

_SIGNATURE_PREFIX = "data:image/png;base64,"


class VisitCreate(ApiModel):
    place: str = Field(min_length=1, max_length=256)
    visit_date: date
    notes: str | None = Field(default=None, max_length=4000)
    signature: str | None = None

    @field_validator("signature")
    @classmethod
    def _png_data_url(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith(_SIGNATURE_PREFIX):
            raise ValueError("signature must be a PNG data URL")
        return v


@router.post("", status_code=201, response_model=VisitOut)
async def create_visit(
    body: VisitCreate,
    ctx: AccessContext = Depends(require_active),
    session: AsyncSession = Depends(db_session),
) -> VisitOut:
    visit = await VisitRepo(session).create(
        supervisor_id=ctx.user_id,
        place=body.place.strip(),
        visit_date=body.visit_date,
        notes=(body.notes or "").strip() or None,
        signature=body.signature,
    )
    await session.commit()
    return VisitOut.from_row(visit)


@router.get("", response_model=list[VisitOut])
async def list_visits(
    ctx: AccessContext = Depends(require_active),
    session: AsyncSession = Depends(db_session),
) -> list[VisitOut]:
    return [VisitOut.from_row(v) for v in await VisitRepo(session).list_for_supervisor(ctx.user_id)]
