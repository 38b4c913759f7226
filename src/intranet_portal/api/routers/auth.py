"""
intranet_portal.api.routers.auth

Self-service account endpoints.

Responsibilities:
- Signup (creates a pending account) and login (admits active accounts only).
- Logout, forced/self-service password change and password recovery.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.accounts.service import AccountService
from intranet_portal.api.deps import db_session, email_sender, identity_provider, settings_dep
from intranet_portal.api.schemas import ApiModel
from intranet_portal.auth.deps import get_principal, require_account
from intranet_portal.auth.identity import IdentityProvider
from intranet_portal.auth.models import AccessContext, Principal
from intranet_portal.notifications.email import EmailSender
from intranet_portal.settings import Settings

router = APIRouter(prefix="/v1/auth", tags=["auth"])


class SignupRequest(ApiModel):
    registration_code: str = Field(max_length=16)
    name: str = Field(max_length=256)
    email: str = Field(max_length=320)
    company: str = Field(max_length=256)
    phone: str = Field(max_length=32)
    area: str | None = None
    title: str | None = Field(default=None, max_length=128)


class LoginRequest(ApiModel):
    registration_code: str = Field(max_length=16)
    password: str = Field(min_length=1)


class LoginResponse(ApiModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    must_change_password: bool


class ChangePasswordRequest(ApiModel):
    new_password: str
    confirm_password: str


class ForgotPasswordRequest(ApiModel):
    email: str = Field(min_length=3, max_length=320)


def _service(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    identity: IdentityProvider = Depends(identity_provider),
    email: EmailSender = Depends(email_sender),
) -> AccountService:
    return AccountService(session=session, settings=settings, identity=identity, email=email)


@router.post("/signup", status_code=201)
async def signup(body: SignupRequest, svc: AccountService = Depends(_service)) -> dict[str, Any]:
    profile = await svc.signup(
        registration_code=body.registration_code,
        name=body.name,
        email=body.email,
        company=body.company,
        phone=body.phone,
        area=body.area,
        title=body.title,
    )
    return {
        "success": True,
        "userId": str(profile.user_id),
        "status": profile.status.value,
        "message": "Signup received. An administrator must approve your account.",
    }


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, svc: AccountService = Depends(_service)) -> LoginResponse:
    result = await svc.login(registration_code=body.registration_code, password=body.password)
    return LoginResponse(
        access_token=result.access_token,
        user_id=str(result.user_id),
        must_change_password=result.must_change_password,
    )


@router.post("/logout")
async def logout(
    principal: Principal = Depends(get_principal),
    svc: AccountService = Depends(_service),
) -> dict[str, bool]:
    await svc.logout(session_id=principal.session_id)
    return {"success": True}


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    ctx: AccessContext = Depends(require_account),
    svc: AccountService = Depends(_service),
) -> dict[str, bool]:
    await svc.change_password(
        user_id=ctx.user_id,
        new_password=body.new_password,
        confirm_password=body.confirm_password,
    )
    return {"success": True}


@router.post("/forgot-password")
async def forgot_password(
    body: ForgotPasswordRequest, svc: AccountService = Depends(_service)
) -> dict[str, Any]:
    return await svc.forgot_password(email=body.email)
