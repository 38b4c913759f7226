"""
intranet_portal.accounts.lifecycle

Account lifecycle state machine.

Responsibilities:
- Define the legal status transitions (pending -> active/blocked, active <-> blocked).
- Gate every authenticated request on the caller's current status and
  forced-password-change flag.
"""

from __future__ import annotations

from intranet_portal.auth.models import AccessContext
from intranet_portal.db.models import ProfileStatus
from intranet_portal.errors import (
    AccountBlocked,
    AccountPendingApproval,
    InvalidTransition,
    PasswordChangeRequired,
)

TRANSITIONS: dict[ProfileStatus, frozenset[ProfileStatus]] = {
    ProfileStatus.pending: frozenset({ProfileStatus.active, ProfileStatus.blocked}),
    ProfileStatus.active: frozenset({ProfileStatus.blocked}),
    ProfileStatus.blocked: frozenset({ProfileStatus.active}),
}


def transition(current: ProfileStatus, target: ProfileStatus) -> bool:
    """
    Validate a status change. Returns False for a same-state no-op, True when
    the change must be applied, and raises `InvalidTransition` otherwise.
    """

    if current == target:
        return False
    if target not in TRANSITIONS[current]:
        raise InvalidTransition(
            f"Cannot move account from {current.value} to {target.value}",
            current=current.value,
            target=target.value,
        )
    return True


def ensure_status_allows_login(status: ProfileStatus | None) -> None:
    if status == ProfileStatus.blocked:
        raise AccountBlocked("Your account is blocked. Contact the administrator.")
    if status != ProfileStatus.active:
        # No profile at all is treated like an unapproved signup.
        raise AccountPendingApproval("Your account is awaiting administrator approval.")


def gate(ctx: AccessContext, *, allow_password_change: bool = False) -> AccessContext:
    ensure_status_allows_login(ctx.status)
    if ctx.must_change_password and not allow_password_change:
        raise PasswordChangeRequired("You must change your password before continuing.")
    return ctx
