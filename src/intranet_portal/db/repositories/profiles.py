"""
intranet_portal.db.repositories.profiles

Repository for `Profile` entities.

Responsibilities:
- Create and fetch profiles by identity, registration code or contact email.
- Apply status / flag / contact-field updates and deletion.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.db.models import Profile, ProfileStatus, utcnow


class ProfileRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        user_id: uuid.UUID,
        registration_code: str,
        name: str,
        email: str | None,
        company: str | None,
        phone: str | None,
        title: str | None = None,
        area: str | None = None,
        status: ProfileStatus = ProfileStatus.pending,
        must_change_password: bool = False,
    ) -> Profile:
        profile = Profile(
            user_id=user_id,
            registration_code=registration_code,
            name=name,
            email=email,
            company=company,
            phone=phone,
            title=title,
            area=area,
            status=status,
            must_change_password=must_change_password,
        )
        self._session.add(profile)
        await self._session.flush()
        return profile

    async def get_by_user_id(self, user_id: uuid.UUID) -> Profile | None:
        stmt = select(Profile).where(Profile.user_id == user_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def get_by_registration_code(self, registration_code: str) -> Profile | None:
        stmt = select(Profile).where(Profile.registration_code == registration_code)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def find_by_email(self, email: str, *, limit: int = 2) -> list[Profile]:
        # Callers only need to tell "exactly one" apart from "none or many".
        stmt = (
            select(Profile)
            .where(func.lower(Profile.email) == email.strip().lower())
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_newest_first(self) -> list[Profile]:
        stmt = select(Profile).order_by(desc(Profile.created_at))
        return list((await self._session.execute(stmt)).scalars().all())

    async def name_map(self) -> dict[uuid.UUID, tuple[str, str]]:
        stmt = select(Profile.user_id, Profile.name, Profile.registration_code)
        rows = (await self._session.execute(stmt)).all()
        return {r.user_id: (r.name, r.registration_code) for r in rows}

    async def set_status(self, profile: Profile, status: ProfileStatus) -> None:
        profile.status = status
        profile.updated_at = utcnow()
        await self._session.flush()

    async def set_must_change_password(self, profile: Profile, value: bool) -> None:
        profile.must_change_password = value
        profile.updated_at = utcnow()
        await self._session.flush()

    async def patch(self, profile: Profile, fields: dict[str, Any]) -> Profile:
        for key, value in fields.items():
            setattr(profile, key, value)
        profile.updated_at = utcnow()
        await self._session.flush()
        return profile

    async def delete_for_user(self, user_id: uuid.UUID) -> int:
        result = await self._session.execute(delete(Profile).where(Profile.user_id == user_id))
        return result.rowcount or 0
