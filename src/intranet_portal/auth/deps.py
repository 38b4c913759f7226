"""
intranet_portal.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a typed `Principal` via the identity provider.
- Build the per-request `AccessContext` from the store (status, roles, area permission).
- Enforce lifecycle, admin and module checks via reusable dependency factories.
"""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from intranet_portal.accounts.context import load_access_context
from intranet_portal.accounts.lifecycle import gate
from intranet_portal.api.deps import db_session, identity_provider
from intranet_portal.auth.identity import IdentityProvider
from intranet_portal.auth.models import AccessContext, Principal
from intranet_portal.errors import Forbidden, Unauthenticated
from intranet_portal.policy.catalog import Module
from intranet_portal.policy.engine import can_access_module

_bearer = HTTPBearer(auto_error=False)


def bearer_token(creds: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> str | None:
    if creds is None or not creds.credentials:
        return None
    return creds.credentials


async def get_principal(
    token: str | None = Depends(bearer_token),
    identity: IdentityProvider = Depends(identity_provider),
) -> Principal:
    if token is None:
        raise Unauthenticated("Missing bearer token")
    # Signature, expiry and session revocation are all checked by the provider.
    return await identity.verify_token(token)


async def access_context(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> AccessContext:
    return await load_access_context(session, principal)


def require_account(ctx: AccessContext = Depends(access_context)) -> AccessContext:
    # Lets a forced-password-change account reach /me and change-password.
    return gate(ctx, allow_password_change=True)


def require_active(ctx: AccessContext = Depends(access_context)) -> AccessContext:
    return gate(ctx)


def require_admin(ctx: AccessContext = Depends(access_context)) -> AccessContext:
    if not ctx.is_admin:
        raise Forbidden("Admin access required")
    return gate(ctx)


def require_module(module: Module):
    def _dep(ctx: AccessContext = Depends(require_active)) -> AccessContext:
        if not can_access_module(ctx, module):
            raise Forbidden(f"Module '{module.value}' is not enabled for your area")
        return ctx

    return _dep


# --- Module Notes -----------------------------------------------------------
# Nothing here trusts token claims for authorization: the token only proves the
# identity and session; roles and status come from the store on every request.
