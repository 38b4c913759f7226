from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.db.models import ReportLink


class ReportLinkRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[ReportLink]:
        # Includes inactive links; the serving path filters through the policy engine.
        stmt = select(ReportLink).order_by(ReportLink.order, ReportLink.title)
        return list((await self._session.execute(stmt)).scalars().all())

    async def get(self, report_id: uuid.UUID) -> ReportLink | None:
        return await self._session.get(ReportLink, report_id)

    async def create(
        self,
        *,
        title: str,
        url: str,
        description: str | None = None,
        icon: str | None = None,
        order: int = 0,
        active: bool = True,
    ) -> ReportLink:
        link = ReportLink(
            title=title,
            url=url,
            description=description,
            icon=icon,
            order=order,
            active=active,
        )
        self._session.add(link)
        await self._session.flush()
        return link

    async def patch(self, link: ReportLink, fields: dict[str, Any]) -> ReportLink:
        for key, value in fields.items():
            setattr(link, key, value)
        await self._session.flush()
        return link

    async def delete(self, link: ReportLink) -> None:
        await self._session.delete(link)
        await self._session.flush()
