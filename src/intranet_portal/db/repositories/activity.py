"""
intranet_portal.db.repositories.activity

Repository for access logs and presence heartbeats.

Responsibilities:
- Append access log entries (append-only).
- Upsert presence by user id (latest write wins).
- Query recent logs and presence rows for the admin analytics view.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.db.models import AccessLog, UserPresence, utcnow


class ActivityRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def log_access(self, *, user_id: uuid.UUID, action: str, page: str | None) -> AccessLog:
        entry = AccessLog(user_id=user_id, action=action, page=page)
        self._session.add(entry)
        await self._session.flush()
        return entry

    async def recent_logs(self, *, limit: int = 100) -> list[AccessLog]:
        stmt = select(AccessLog).order_by(desc(AccessLog.created_at)).limit(limit)
        return list((await self._session.execute(stmt)).scalars().all())

    async def heartbeat(self, *, user_id: uuid.UUID, page: str | None) -> UserPresence:
        now = utcnow()
        row = await self._session.get(UserPresence, user_id)
        if row is None:
            try:
                async with self._session.begin_nested():
                    row = UserPresence(user_id=user_id, last_seen_at=now, current_page=page)
                    self._session.add(row)
                return row
            except IntegrityError:
                # Another tab inserted the first row between our read and insert.
                row = await self._session.get(UserPresence, user_id, populate_existing=True)
                if row is None:
                    raise
        # Keep last_seen_at monotonic per identity even if clocks or tabs race.
        row.last_seen_at = max(row.last_seen_at, now)
        row.current_page = page
        await self._session.flush()
        return row

    async def access_times_since(self, cutoff: datetime) -> list[datetime]:
        stmt = select(AccessLog.created_at).where(AccessLog.created_at >= cutoff)
        return list((await self._session.execute(stmt)).scalars().all())

    async def seen_since(self, cutoff: datetime) -> list[UserPresence]:
        stmt = (
            select(UserPresence)
            .where(UserPresence.last_seen_at > cutoff)
            .order_by(desc(UserPresence.last_seen_at))
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def delete_presence(self, user_id: uuid.UUID) -> int:
        result = await self._session.execute(
            delete(UserPresence).where(UserPresence.user_id == user_id)
        )
        return result.rowcount or 0


# --- Module Notes -----------------------------------------------------------
# Access logs are never deleted, not even when the user is; they are an audit trail.
