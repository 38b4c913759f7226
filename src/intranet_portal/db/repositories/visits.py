from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.db.models import Visit, VisitStatus


class VisitRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        supervisor_id: uuid.UUID,
        place: str,
        visit_date: date,
        notes: str | None,
        signature: str | None,
    ) -> Visit:
        visit = Visit(
            supervisor_id=supervisor_id,
            place=place,
            visit_date=visit_date,
            notes=notes,
            signature=signature,
            status=VisitStatus.completed,
        )
        self._session.add(visit)
        await self._session.flush()
        return visit

    async def list_for_supervisor(self, supervisor_id: uuid.UUID) -> list[Visit]:
        stmt = (
            select(Visit)
            .where(Visit.supervisor_id == supervisor_id)
            .order_by(desc(Visit.visit_date), desc(Visit.created_at))
        )
        return list((await self._session.execute(stmt)).scalars().all())
