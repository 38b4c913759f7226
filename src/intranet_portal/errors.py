"""
intranet_portal.errors

Domain error taxonomy shared by services, the gateway and the API layer.

Responsibilities:
- Give every failure mode a distinct type, HTTP status and stable code.
- Carry structured details (e.g. which steps of a multi-step operation completed).
"""

from __future__ import annotations

from typing import Any


class PortalError(Exception):
    status_code: int = 500
    code: str = "error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class Unauthenticated(PortalError):
    status_code = 401
    code = "unauthenticated"


class Forbidden(PortalError):
    status_code = 403
    code = "forbidden"


class AccountPendingApproval(Forbidden):
    code = "account_pending_approval"


class AccountBlocked(Forbidden):
    code = "account_blocked"


class PasswordChangeRequired(Forbidden):
    code = "password_change_required"


class ValidationError(PortalError):
    status_code = 400
    code = "validation_error"


class InvalidTransition(ValidationError):
    code = "invalid_transition"


class NotFound(PortalError):
    status_code = 404
    code = "not_found"


class UpstreamFailure(PortalError):
    """
    An identity-provider or store call failed. The collaborator message is kept
    verbatim in `message`; callers should not retry automatically.
    """

    status_code = 500
    code = "upstream_failure"


class PartialFailure(UpstreamFailure):
    code = "partial_failure"


# --- Module Notes -----------------------------------------------------------
# `ValidationError` intentionally shadows pydantic's name inside this package;
# import pydantic's as `pydantic.ValidationError` where both are needed.
