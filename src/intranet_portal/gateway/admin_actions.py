"""
intranet_portal.gateway.admin_actions

Privileged admin action gateway.

Responsibilities:
- Authorize every call from scratch: bearer -> identity provider, admin role
  re-read from `user_roles`, caller lifecycle gate.
- Execute one action per call against the target account:
  reset-password, delete-user, update-profile, promote, demote, set-status.
- Report multi-step outcomes explicitly (credential rotated vs. email sent,
  rows deleted vs. identity deleted).
"""

from __future__ import annotations

import enum
import uuid
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.accounts.context import load_access_context
from intranet_portal.accounts.lifecycle import gate, transition
from intranet_portal.accounts.service import send_credential_email
from intranet_portal.accounts.validation import clean_profile_patch
from intranet_portal.auth.identity import IdentityProvider
from intranet_portal.auth.models import AccessContext
from intranet_portal.auth.passwords import generate_password, validate_password
from intranet_portal.db.models import AppRole, Profile, ProfileStatus
from intranet_portal.db.repositories.activity import ActivityRepo
from intranet_portal.db.repositories.profiles import ProfileRepo
from intranet_portal.db.repositories.roles import RoleRepo
from intranet_portal.errors import (
    Forbidden,
    NotFound,
    PartialFailure,
    Unauthenticated,
    UpstreamFailure,
    ValidationError,
)
from intranet_portal.notifications.email import EmailSender
from intranet_portal.observability.logging import get_logger
from intranet_portal.settings import Settings

log = get_logger(__name__)


class AdminAction(enum.StrEnum):
    reset_password = "reset-password"
    delete_user = "delete-user"
    update_profile = "update-profile"
    promote = "promote"
    demote = "demote"
    set_status = "set-status"


class AdminActionGateway:
    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        identity: IdentityProvider,
        email: EmailSender,
    ) -> None:
        self._session = session
        self._settings = settings
        self._identity = identity
        self._email = email

        self._profiles = ProfileRepo(session)
        self._roles = RoleRepo(session)
        self._activity = ActivityRepo(session)

    async def authorize(self, bearer: str | None) -> AccessContext:
        if not bearer:
            raise Unauthenticated("Missing bearer token")
        principal = await self._identity.verify_token(bearer)
        # Checked before any target row is read.
        if not await self._roles.has_role(principal.user_id, AppRole.admin):
            log.info("gateway.denied", caller=str(principal.user_id))
            raise Forbidden("Admin access required")
        ctx = await load_access_context(self._session, principal)
        return gate(ctx)

    async def handle(
        self,
        caller: AccessContext,
        *,
        action: AdminAction,
        user_id: uuid.UUID,
        new_password: str | None = None,
        profile_data: dict[str, Any] | None = None,
        status: ProfileStatus | None = None,
    ) -> dict[str, Any]:
        """Run one action for a caller already returned by `authorize`."""

        log.info("gateway.action", action=action.value, caller=str(caller.user_id), target=str(user_id))

        if action is AdminAction.reset_password:
            return await self.reset_password(user_id, new_password=new_password)
        if action is AdminAction.delete_user:
            return await self.delete_user(user_id)
        if action is AdminAction.update_profile:
            return await self.update_profile(user_id, profile_data or {})
        if action is AdminAction.promote:
            return await self.set_admin(user_id, admin=True)
        if action is AdminAction.demote:
            return await self.set_admin(user_id, admin=False, caller_id=caller.user_id)
        if status is None:
            raise ValidationError("status is required for set-status")
        return await self.set_status(user_id, status)

    async def reset_password(
        self, user_id: uuid.UUID, *, new_password: str | None = None
    ) -> dict[str, Any]:
        profile = await self._require_profile(user_id)

        if new_password:
            validate_password(new_password)
            password = new_password
        elif not profile.email:
            # No channel to deliver a random credential: use the documented fallback.
            password = self._settings.fallback_password
        else:
            password = generate_password()

        await self._identity.admin_update_credential(user_id, password)
        await self._profiles.set_must_change_password(profile, True)
        await self._session.commit()
        log.info("gateway.reset_password", target=str(user_id), explicit=bool(new_password))

        if not profile.email:
            return {"success": True, "passwordRotated": True, "emailSent": False}
        delivery = await send_credential_email(
            self._email, profile=profile, password=password, reason="Password reset"
        )
        return {"success": True, "passwordRotated": True, **delivery.as_dict()}

    async def delete_user(self, user_id: uuid.UUID) -> dict[str, Any]:
        profile = await self._profiles.get_by_user_id(user_id)
        roles = await self._roles.roles_for(user_id)
        if profile is None and not roles:
            raise NotFound("User not found")

        # Portal rows first; access logs are kept as an audit trail.
        await self._roles.delete_for_user(user_id)
        await self._activity.delete_presence(user_id)
        await self._profiles.delete_for_user(user_id)
        await self._session.commit()

        try:
            await self._identity.admin_delete_identity(user_id)
        except NotFound:
            log.warning("gateway.delete_user.identity_missing", target=str(user_id))
        except UpstreamFailure as e:
            log.error("gateway.delete_user.partial", target=str(user_id), error=e.message)
            raise PartialFailure(
                e.message, rowsDeleted=True, identityDeleted=False
            ) from e

        log.info("gateway.delete_user", target=str(user_id))
        return {"success": True, "rowsDeleted": True, "identityDeleted": True}

    async def update_profile(self, user_id: uuid.UUID, data: dict[str, Any]) -> dict[str, Any]:
        profile = await self._require_profile(user_id)
        fields = clean_profile_patch(data)
        if fields:
            await self._profiles.patch(profile, fields)
            await self._session.commit()
        log.info("gateway.update_profile", target=str(user_id), fields=sorted(fields))
        return {"success": True, "updated": sorted(fields)}

    async def set_admin(
        self, user_id: uuid.UUID, *, admin: bool, caller_id: uuid.UUID | None = None
    ) -> dict[str, Any]:
        await self._require_profile(user_id)
        if not admin and caller_id == user_id:
            raise ValidationError("Admins cannot remove their own admin role")
        if admin:
            changed = await self._roles.grant(user_id, AppRole.admin)
        else:
            changed = await self._roles.revoke(user_id, AppRole.admin)
        await self._session.commit()
        log.info("gateway.set_admin", target=str(user_id), admin=admin, changed=changed)
        return {"success": True, "isAdmin": admin, "changed": changed}

    async def set_status(self, user_id: uuid.UUID, status: ProfileStatus) -> dict[str, Any]:
        profile = await self._require_profile(user_id)
        changed = transition(profile.status, status)
        if changed:
            await self._profiles.set_status(profile, status)
            await self._session.commit()
        log.info("gateway.set_status", target=str(user_id), status=status.value, changed=changed)
        return {"success": True, "status": status.value, "changed": changed}

    async def _require_profile(self, user_id: uuid.UUID) -> Profile:
        profile = await self._profiles.get_by_user_id(user_id)
        if profile is None:
            raise NotFound("User not found")
        return profile


# --- Module Notes -----------------------------------------------------------
# Role (admin/user) and lifecycle status are independent axes: promoting a
# pending account does not activate it, and blocking an admin keeps the role row.
