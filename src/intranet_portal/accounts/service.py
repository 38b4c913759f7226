"""
intranet_portal.accounts.service

Self-service account flows (transaction owner).

Responsibilities:
- Signup: identity + pending profile + `user` role, then notify the admin.
- Login: authenticate, then admit only active accounts.
- Change password, forgot password and logout.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.accounts.lifecycle import ensure_status_allows_login
from intranet_portal.accounts.validation import (
    login_id_for,
    normalize_email,
    normalize_phone,
    normalize_registration_code,
    require_text,
)
from intranet_portal.auth.identity import IdentityProvider
from intranet_portal.auth.passwords import generate_password, validate_password
from intranet_portal.db.models import AppRole, Profile, ProfileStatus, utcnow
from intranet_portal.db.repositories.profiles import ProfileRepo
from intranet_portal.db.repositories.roles import RoleRepo
from intranet_portal.errors import NotFound, PortalError, Unauthenticated, ValidationError
from intranet_portal.notifications.email import EmailDeliveryError, EmailSender
from intranet_portal.notifications.templates import new_password_email, new_user_pending_email
from intranet_portal.observability.logging import get_logger
from intranet_portal.policy.catalog import parse_area
from intranet_portal.settings import Settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LoginResult:
    user_id: uuid.UUID
    access_token: str
    must_change_password: bool


@dataclass(frozen=True, slots=True)
class DeliveryResult:
    email_sent: bool
    email_error: str | None = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"emailSent": self.email_sent}
        if self.email_error is not None:
            out["emailError"] = self.email_error
        return out


async def send_credential_email(
    sender: EmailSender, *, profile: Profile, password: str, reason: str
) -> DeliveryResult:
    """
    Deliver a new credential to the profile's contact email.

    Never raises for delivery problems: the caller has already committed the
    credential change and only reports the outcome.
    """

    if not profile.email:
        return DeliveryResult(email_sent=False, email_error="No email on file")
    subject, html = new_password_email(name=profile.name, password=password, reason=reason)
    try:
        await sender.send(to=profile.email, subject=subject, html=html)
    except EmailDeliveryError as e:
        log.warning("email.delivery_failed", user_id=str(profile.user_id), error=str(e))
        return DeliveryResult(email_sent=False, email_error=str(e))
    return DeliveryResult(email_sent=True)


class AccountService:
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

    async def signup(
        self,
        *,
        registration_code: str,
        name: str,
        email: str,
        company: str,
        phone: str,
        area: str | None = None,
        title: str | None = None,
    ) -> Profile:
        code = normalize_registration_code(registration_code)
        name = require_text(name, "name")
        email = normalize_email(email)
        company = require_text(company, "company")
        phone = normalize_phone(phone)
        parsed_area = None
        if area:
            parsed_area = parse_area(area)
            if parsed_area is None:
                raise ValidationError("Unknown area", area=area)

        if await self._profiles.get_by_registration_code(code) is not None:
            raise ValidationError("Registration code already registered")

        # The signup credential is random and never returned; the user gets a
        # real one from an admin reset or the forgot-password flow.
        user_id = await self._identity.sign_up(
            login_id_for(code, self._settings.login_email_domain),
            generate_password(16),
            {"name": name, "registration_code": code},
        )
        try:
            profile = await self._profiles.create(
                user_id=user_id,
                registration_code=code,
                name=name,
                email=email,
                company=company,
                phone=phone,
                title=(title or "").strip() or None,
                area=parsed_area.value if parsed_area else None,
                status=ProfileStatus.pending,
            )
            await self._roles.grant(user_id, AppRole.user)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            # Do not leave an identity without a profile behind.
            await self._identity.admin_delete_identity(user_id)
            raise

        log.info("signup.created", user_id=str(user_id), registration_code=code)
        await self._notify_admin(profile)
        return profile

    async def login(self, *, registration_code: str, password: str) -> LoginResult:
        try:
            code = normalize_registration_code(registration_code)
        except ValidationError as e:
            raise Unauthenticated("Invalid registration code or password") from e

        try:
            signed = await self._identity.sign_in(
                login_id_for(code, self._settings.login_email_domain), password
            )
        except Unauthenticated as e:
            raise Unauthenticated("Invalid registration code or password") from e

        profile = await self._profiles.get_by_registration_code(code)
        status = profile.status if profile is not None else None
        try:
            ensure_status_allows_login(status)
        except PortalError:
            # The session was issued before the status check; revoke it immediately.
            await self._identity.sign_out(signed.session_id)
            log.info(
                "login.denied",
                user_id=str(signed.user_id),
                status=status.value if status else None,
            )
            raise

        log.info("login.succeeded", user_id=str(signed.user_id))
        return LoginResult(
            user_id=signed.user_id,
            access_token=signed.access_token,
            must_change_password=profile is not None and profile.must_change_password,
        )

    async def logout(self, *, session_id: uuid.UUID) -> None:
        await self._identity.sign_out(session_id)

    async def change_password(
        self, *, user_id: uuid.UUID, new_password: str, confirm_password: str
    ) -> None:
        if new_password != confirm_password:
            raise ValidationError("Passwords do not match")
        validate_password(new_password)

        profile = await self._profiles.get_by_user_id(user_id)
        if profile is None:
            raise NotFound("Profile not found")

        await self._identity.update_credential(user_id, new_password)
        # Only cleared once the credential update has succeeded.
        await self._profiles.set_must_change_password(profile, False)
        await self._session.commit()
        log.info("password.changed", user_id=str(user_id))

    async def forgot_password(self, *, email: str) -> dict[str, Any]:
        matches = await self._profiles.find_by_email(email, limit=2)
        if len(matches) != 1:
            # Zero and ambiguous matches look the same to the caller.
            log.info("password.recovery_rejected", matches=len(matches))
            raise NotFound("Email not found")
        profile = matches[0]

        password = generate_password()
        await self._identity.admin_update_credential(profile.user_id, password)
        await self._profiles.set_must_change_password(profile, True)
        await self._session.commit()
        log.info("password.recovered", user_id=str(profile.user_id))

        delivery = await send_credential_email(
            self._email, profile=profile, password=password, reason="Password recovery"
        )
        return {"success": True, "passwordRotated": True, **delivery.as_dict()}

    async def _notify_admin(self, profile: Profile) -> None:
        to = self._settings.admin_notify_email
        if not to:
            return
        subject, html = new_user_pending_email(
            name=profile.name,
            registration_code=profile.registration_code,
            requested_at=utcnow(),
        )
        try:
            await self._email.send(to=to, subject=subject, html=html)
        except EmailDeliveryError as e:
            log.warning("email.delivery_failed", kind="new_user", error=str(e))
