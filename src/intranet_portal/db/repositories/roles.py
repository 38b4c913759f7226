from __future__ import annotations

import uuid

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.db.models import AppRole, UserRole


class RoleRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def roles_for(self, user_id: uuid.UUID) -> frozenset[str]:
        stmt = select(UserRole.role).where(UserRole.user_id == user_id)
        return frozenset(str(r) for r in (await self._session.execute(stmt)).scalars().all())

    async def has_role(self, user_id: uuid.UUID, role: AppRole) -> bool:
        stmt = select(UserRole.id).where(UserRole.user_id == user_id, UserRole.role == role)
        return (await self._session.execute(stmt)).first() is not None

    async def admin_ids(self) -> set[uuid.UUID]:
        stmt = select(UserRole.user_id).where(UserRole.role == AppRole.admin)
        return set((await self._session.execute(stmt)).scalars().all())

    async def grant(self, user_id: uuid.UUID, role: AppRole) -> bool:
        if await self.has_role(user_id, role):
            return False
        self._session.add(UserRole(user_id=user_id, role=role))
        await self._session.flush()
        return True

    async def revoke(self, user_id: uuid.UUID, role: AppRole) -> bool:
        result = await self._session.execute(
            delete(UserRole).where(UserRole.user_id == user_id, UserRole.role == role)
        )
        return bool(result.rowcount)

    async def delete_for_user(self, user_id: uuid.UUID) -> int:
        result = await self._session.execute(delete(UserRole).where(UserRole.user_id == user_id))
        return result.rowcount or 0
