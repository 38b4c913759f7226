"""
intranet_portal.auth.identity

Identity provider boundary.

Responsibilities:
- Define the opaque identity + credential oracle the portal depends on
  (`IdentityProvider`): sign in/up, credential updates, admin identity ops,
  bearer verification and session revocation.
- Provide `LocalIdentityProvider`, a self-contained implementation over the
  `identities` / `auth_sessions` tables (bcrypt hashes, signed session tokens).

The provider owns its own transactions: a portal-side rollback never undoes an
identity change, which is exactly the partial-completion model the gateway reports.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from intranet_portal.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate, issue_token
from intranet_portal.auth.models import Principal
from intranet_portal.auth.passwords import hash_password, verify_password
from intranet_portal.db.models import AuthSession, Identity, utcnow
from intranet_portal.errors import NotFound, Unauthenticated, UpstreamFailure, ValidationError


@dataclass(frozen=True, slots=True)
class SignedInSession:
    user_id: uuid.UUID
    session_id: uuid.UUID
    access_token: str


class IdentityProvider(Protocol):
    async def sign_in(self, login: str, secret: str) -> SignedInSession: ...

    async def sign_up(self, login: str, secret: str, metadata: dict[str, Any]) -> uuid.UUID: ...

    async def sign_out(self, session_id: uuid.UUID) -> None: ...

    async def verify_token(self, token: str) -> Principal: ...

    async def update_credential(self, user_id: uuid.UUID, new_secret: str) -> None: ...

    async def admin_create_identity(
        self, login: str, secret: str, metadata: dict[str, Any]
    ) -> uuid.UUID: ...

    async def admin_update_credential(self, user_id: uuid.UUID, new_secret: str) -> None: ...

    async def admin_delete_identity(self, user_id: uuid.UUID) -> None: ...


class LocalIdentityProvider:
    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        jwt_cfg: JwtConfig,
        session_ttl: timedelta = timedelta(hours=8),
    ) -> None:
        self._session_factory = session_factory
        self._jwt_cfg = jwt_cfg
        self._session_ttl = session_ttl

    async def sign_in(self, login: str, secret: str) -> SignedInSession:
        try:
            async with self._session_factory() as session:
                stmt = select(Identity).where(Identity.login == login.strip().lower())
                identity = (await session.execute(stmt)).scalar_one_or_none()
                if identity is None or not verify_password(secret, identity.password_hash):
                    raise Unauthenticated("Invalid login credentials")
                auth_session = AuthSession(identity_id=identity.id)
                session.add(auth_session)
                await session.commit()
        except SQLAlchemyError as e:
            raise UpstreamFailure(f"Identity provider failure: {e}") from e

        token = issue_token(
            cfg=self._jwt_cfg,
            subject=str(identity.id),
            session_id=str(auth_session.id),
            ttl=self._session_ttl,
        )
        return SignedInSession(
            user_id=identity.id, session_id=auth_session.id, access_token=token
        )

    async def sign_up(self, login: str, secret: str, metadata: dict[str, Any]) -> uuid.UUID:
        return await self._create(login, secret, metadata)

    async def admin_create_identity(
        self, login: str, secret: str, metadata: dict[str, Any]
    ) -> uuid.UUID:
        return await self._create(login, secret, metadata)

    async def sign_out(self, session_id: uuid.UUID) -> None:
        try:
            async with self._session_factory() as session:
                row = await session.get(AuthSession, session_id)
                if row is not None and row.revoked_at is None:
                    row.revoked_at = utcnow()
                    await session.commit()
        except SQLAlchemyError as e:
            raise UpstreamFailure(f"Identity provider failure: {e}") from e

    async def verify_token(self, token: str) -> Principal:
        try:
            payload = decode_and_validate(cfg=self._jwt_cfg, token=token)
            user_id = uuid.UUID(str(payload["sub"]))
            session_id = uuid.UUID(str(payload["sid"]))
        except (JwtValidationError, ValueError) as e:
            raise Unauthenticated(f"Invalid token: {e}") from e

        try:
            async with self._session_factory() as session:
                row = await session.get(AuthSession, session_id)
        except SQLAlchemyError as e:
            raise UpstreamFailure(f"Identity provider failure: {e}") from e
        if row is None or row.revoked_at is not None or row.identity_id != user_id:
            raise Unauthenticated("Session is no longer valid")
        return Principal(user_id=user_id, session_id=session_id)

    async def update_credential(self, user_id: uuid.UUID, new_secret: str) -> None:
        await self._set_password(user_id, new_secret)

    async def admin_update_credential(self, user_id: uuid.UUID, new_secret: str) -> None:
        await self._set_password(user_id, new_secret)

    async def admin_delete_identity(self, user_id: uuid.UUID) -> None:
        try:
            async with self._session_factory() as session:
                identity = await session.get(Identity, user_id)
                if identity is None:
                    raise NotFound("User not found")
                await session.execute(delete(AuthSession).where(AuthSession.identity_id == user_id))
                await session.delete(identity)
                await session.commit()
        except SQLAlchemyError as e:
            raise UpstreamFailure(f"Failed to delete user: {e}") from e

    async def _create(self, login: str, secret: str, metadata: dict[str, Any]) -> uuid.UUID:
        identity = Identity(
            login=login.strip().lower(),
            password_hash=hash_password(secret),
            user_metadata=dict(metadata),
        )
        try:
            async with self._session_factory() as session:
                session.add(identity)
                await session.commit()
        except IntegrityError as e:
            raise ValidationError("User already registered") from e
        except SQLAlchemyError as e:
            raise UpstreamFailure(f"Identity provider failure: {e}") from e
        return identity.id

    async def _set_password(self, user_id: uuid.UUID, new_secret: str) -> None:
        try:
            async with self._session_factory() as session:
                identity = await session.get(Identity, user_id)
                if identity is None:
                    raise NotFound("User not found")
                identity.password_hash = hash_password(new_secret)
                await session.commit()
        except SQLAlchemyError as e:
            raise UpstreamFailure(f"Failed to update password: {e}") from e


# --- Module Notes -----------------------------------------------------------
# A hosted provider (e.g. a BaaS auth API) can replace LocalIdentityProvider by
# implementing the same Protocol; nothing else in the portal touches `identities`.
