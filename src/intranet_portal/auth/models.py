"""
intranet_portal.auth.models

Auth domain models.

Responsibilities:
- Define the verified bearer identity (`Principal`).
- Define the explicit per-request `AccessContext` consumed by policy and lifecycle checks.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from intranet_portal.db.models import AppRole, ProfileStatus
from intranet_portal.policy.engine import PermissionRule


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Identity proven by a valid, unrevoked session token.
    Carries no roles: authorization data is always re-read from the store.
    """

    user_id: uuid.UUID
    session_id: uuid.UUID


@dataclass(frozen=True, slots=True)
class AccessContext:
    user_id: uuid.UUID
    session_id: uuid.UUID | None
    roles: frozenset[str]
    status: ProfileStatus | None
    must_change_password: bool
    area: str | None
    permission: PermissionRule | None

    @property
    def is_admin(self) -> bool:
        return AppRole.admin in self.roles


# --- Module Notes -----------------------------------------------------------
# Built by `api.deps.access_context` per request; tests construct it directly.
