from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.api.deps import db_session
from intranet_portal.api.schemas import ApiModel
from intranet_portal.auth.deps import require_active
from intranet_portal.auth.models import AccessContext
from intranet_portal.db.repositories.activity import ActivityRepo

router = APIRouter(prefix="/v1/activity", tags=["activity"])


class AccessLogRequest(ApiModel):
    action: str = Field(default="page_view", min_length=1, max_length=64)
    page: str | None = Field(default=None, max_length=256)


class HeartbeatRequest(ApiModel):
    page: str | None = Field(default=None, max_length=256)


@router.post("/log", status_code=201)
async def log_access(
    body: AccessLogRequest,
    ctx: AccessContext = Depends(require_active),
    session: AsyncSession = Depends(db_session),
) -> dict[str, bool]:
    await ActivityRepo(session).log_access(user_id=ctx.user_id, action=body.action, page=body.page)
    await session.commit()
    return {"success": True}


@router.post("/heartbeat")
async def heartbeat(
    body: HeartbeatRequest,
    ctx: AccessContext = Depends(require_active),
    session: AsyncSession = Depends(db_session),
) -> dict[str, bool]:
    await ActivityRepo(session).heartbeat(user_id=ctx.user_id, page=body.page)
    await session.commit()
    return {"success": True}
