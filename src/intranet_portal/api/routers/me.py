from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.api.deps import db_session
from intranet_portal.api.schemas import ProfileOut
from intranet_portal.auth.deps import require_account
from intranet_portal.auth.models import AccessContext
from intranet_portal.db.repositories.profiles import ProfileRepo
from intranet_portal.errors import NotFound
from intranet_portal.policy.engine import effective_modules

router = APIRouter(prefix="/v1", tags=["me"])


@router.get("/me")
async def me(
    ctx: AccessContext = Depends(require_account),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    profile = await ProfileRepo(session).get_by_user_id(ctx.user_id)
    if profile is None:
        raise NotFound("Profile not found")
    return {
        "profile": ProfileOut.from_row(profile).model_dump(mode="json", by_alias=True),
        "isAdmin": ctx.is_admin,
        "modules": sorted(m.value for m in effective_modules(ctx)),
    }
