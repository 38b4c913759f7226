"""
intranet_portal.db.repositories.area_permissions

Repository for `AreaPermission` records.

Responsibilities:
- Load stored records and convert them into typed `PermissionRule`s.
- Upsert records by area (last write wins).
- Seed defaults for known areas that have no record yet.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.db.models import AreaPermission, utcnow
from intranet_portal.policy.catalog import (
    DEFAULT_AREA_PERMISSIONS,
    Area,
    Module,
    parse_area,
    parse_modules,
)
from intranet_portal.policy.engine import PermissionRule


def to_rule(row: AreaPermission) -> PermissionRule | None:
    area = parse_area(row.area)
    if area is None:
        return None
    return PermissionRule(
        area=area,
        modules=parse_modules(row.modules),
        report_ids=frozenset(str(r) for r in (row.report_ids or [])),
        all_access=bool(row.all_access),
    )


class AreaPermissionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[AreaPermission]:
        stmt = select(AreaPermission).order_by(AreaPermission.area)
        return list((await self._session.execute(stmt)).scalars().all())

    async def get(self, area: str) -> AreaPermission | None:
        stmt = select(AreaPermission).where(AreaPermission.area == area)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def rule_for(self, area: str | None) -> PermissionRule | None:
        parsed = parse_area(area)
        if parsed is None:
            return None
        row = await self.get(parsed.value)
        return to_rule(row) if row is not None else None

    async def upsert(
        self,
        *,
        area: Area,
        modules: frozenset[Module],
        report_ids: list[str],
        all_access: bool,
    ) -> AreaPermission:
        row = await self.get(area.value)
        if row is None:
            row = AreaPermission(area=area.value)
            self._session.add(row)
        row.modules = sorted(m.value for m in modules)
        row.report_ids = list(dict.fromkeys(report_ids))
        row.all_access = all_access
        row.updated_at = utcnow()
        await self._session.flush()
        return row

    async def seed_missing_defaults(self) -> list[Area]:
        existing = {r.area for r in await self.list_all()}
        seeded: list[Area] = []
        for area, defaults in DEFAULT_AREA_PERMISSIONS.items():
            if area.value in existing:
                continue
            await self.upsert(
                area=area,
                modules=defaults.modules,
                report_ids=[],
                all_access=defaults.all_access,
            )
            seeded.append(area)
        return seeded


# --- Module Notes -----------------------------------------------------------
# Concurrent admin edits to the same area are last-write-wins; no version column.
