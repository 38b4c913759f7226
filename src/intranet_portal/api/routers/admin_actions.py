"""
intranet_portal.api.routers.admin_actions

HTTP binding of the admin action gateway.

Responsibilities:
- Authorize the caller through the gateway before the body is even read, so an
  anonymous or non-admin caller never sees body validation details.
- Parse `{action, userId, newPassword?, profileData?, status?}` and dispatch.
"""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.api.deps import db_session, email_sender, identity_provider, settings_dep
from intranet_portal.api.schemas import ApiModel
from intranet_portal.auth.deps import bearer_token
from intranet_portal.auth.identity import IdentityProvider
from intranet_portal.db.models import ProfileStatus
from intranet_portal.gateway.admin_actions import AdminAction, AdminActionGateway
from intranet_portal.notifications.email import EmailSender
from intranet_portal.settings import Settings

router = APIRouter(prefix="/v1/admin", tags=["admin"])


class AdminActionRequest(ApiModel):
    action: AdminAction
    user_id: uuid.UUID
    new_password: str | None = None
    profile_data: dict[str, Any] | None = None
    status: ProfileStatus | None = None


async def _read_action(request: Request) -> AdminActionRequest:
    try:
        payload = await request.json()
    except ValueError as e:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error"}]
        ) from e
    try:
        return AdminActionRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors(include_url=False)]
        ) from e


@router.post("/actions")
async def admin_action(
    request: Request,
    token: str | None = Depends(bearer_token),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    identity: IdentityProvider = Depends(identity_provider),
    email: EmailSender = Depends(email_sender),
) -> dict[str, Any]:
    gateway = AdminActionGateway(session=session, settings=settings, identity=identity, email=email)
    caller = await gateway.authorize(token)
    body = await _read_action(request)
    return await gateway.handle(
        caller,
        action=body.action,
        user_id=body.user_id,
        new_password=body.new_password,
        profile_data=body.profile_data,
        status=body.status,
    )
