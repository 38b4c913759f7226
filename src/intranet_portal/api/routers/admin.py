"""
intranet_portal.api.routers.admin

Admin management views.

Responsibilities:
- List users with their admin flag.
- Read and upsert area permissions (merged over the default catalog).
- Aggregate access analytics (recent logs, online users, last 7 days).
"""

from __future__ import annotations

from collections import Counter
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.api.deps import db_session, settings_dep
from intranet_portal.api.schemas import ApiModel, ProfileOut
from intranet_portal.auth.deps import require_admin
from intranet_portal.auth.models import AccessContext
from intranet_portal.db.models import utcnow
from intranet_portal.db.repositories.activity import ActivityRepo
from intranet_portal.db.repositories.area_permissions import AreaPermissionRepo
from intranet_portal.db.repositories.profiles import ProfileRepo
from intranet_portal.db.repositories.roles import RoleRepo
from intranet_portal.errors import ValidationError
from intranet_portal.observability.logging import get_logger
from intranet_portal.policy.catalog import (
    ALL_MODULES,
    DEFAULT_AREA_PERMISSIONS,
    Area,
    Module,
    parse_area,
)
from intranet_portal.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin"])


class AreaPermissionIn(ApiModel):
    area: str
    modules: list[Module] = Field(default_factory=list)
    report_ids: list[str] = Field(default_factory=list)
    all_access: bool = False


class AreaPermissionOut(ApiModel):
    area: str
    modules: list[str]
    report_ids: list[str]
    all_access: bool


@router.get("/users")
async def list_users(
    _: AccessContext = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> list[dict[str, Any]]:
    admins = await RoleRepo(session).admin_ids()
    out: list[dict[str, Any]] = []
    for p in await ProfileRepo(session).list_newest_first():
        row = ProfileOut.from_row(p).model_dump(mode="json", by_alias=True)
        row["isAdmin"] = p.user_id in admins
        out.append(row)
    return out


@router.get("/permissions", response_model=list[AreaPermissionOut])
async def get_permissions(
    _: AccessContext = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> list[AreaPermissionOut]:
    stored = {r.area: r for r in await AreaPermissionRepo(session).list_all()}
    out: list[AreaPermissionOut] = []
    for area in Area:
        row = stored.get(area.value)
        if row is not None:
            out.append(
                AreaPermissionOut(
                    area=area.value,
                    modules=list(row.modules or []),
                    report_ids=list(row.report_ids or []),
                    all_access=row.all_access,
                )
            )
        else:
            defaults = DEFAULT_AREA_PERMISSIONS[area]
            out.append(
                AreaPermissionOut(
                    area=area.value,
                    modules=sorted(m.value for m in defaults.modules),
                    report_ids=[],
                    all_access=defaults.all_access,
                )
            )
    return out


@router.put("/permissions", response_model=list[AreaPermissionOut])
async def put_permissions(
    body: list[AreaPermissionIn],
    ctx: AccessContext = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> list[AreaPermissionOut]:
    repo = AreaPermissionRepo(session)
    out: list[AreaPermissionOut] = []
    for item in body:
        area = parse_area(item.area)
        if area is None:
            raise ValidationError("Unknown area", area=item.area)
        # Enabling all-access implies every module.
        modules = ALL_MODULES if item.all_access else frozenset(item.modules)
        row = await repo.upsert(
            area=area,
            modules=modules,
            report_ids=item.report_ids,
            all_access=item.all_access,
        )
        out.append(
            AreaPermissionOut(
                area=row.area,
                modules=list(row.modules),
                report_ids=list(row.report_ids),
                all_access=row.all_access,
            )
        )
    await session.commit()
    log.info("permissions.updated", caller=str(ctx.user_id), areas=[o.area for o in out])
    return out


@router.get("/analytics")
async def analytics(
    _: AccessContext = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> dict[str, Any]:
    activity = ActivityRepo(session)
    now = utcnow()

    logs = await activity.recent_logs(limit=settings.analytics_log_limit)
    online = await activity.seen_since(
        now - timedelta(seconds=settings.presence_online_window_seconds)
    )

    today = now.date()
    first_day = today - timedelta(days=6)
    counts = Counter(
        t.date()
        for t in await activity.access_times_since(
            now.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=6)
        )
    )
    days = [first_day + timedelta(days=i) for i in range(7)]
    daily = [{"date": d.isoformat(), "count": counts.get(d, 0)} for d in days]

    names = await ProfileRepo(session).name_map()
    return {
        "recentLogs": [
            {
                "userId": str(e.user_id),
                "action": e.action,
                "page": e.page,
                "createdAt": e.created_at.isoformat(),
            }
            for e in logs
        ],
        "onlineUsers": [
            {
                "userId": str(p.user_id),
                "lastSeenAt": p.last_seen_at.isoformat(),
                "currentPage": p.current_page,
            }
            for p in online
        ],
        "dailyAccess": daily,
        "profiles": {
            str(uid): {"name": name, "registrationCode": code}
            for uid, (name, code) in names.items()
        },
    }
