"""
intranet_portal.accounts.validation

Field validation for profile data entered by users or admins.

Responsibilities:
- Validate registration codes and derive the identity provider login id.
- Normalize phone numbers and contact emails.
- Filter admin profile edits down to the editable fields.
"""

from __future__ import annotations

import re
from typing import Any

from intranet_portal.errors import ValidationError

REGISTRATION_CODE_RE = re.compile(r"^TT\d{6}$")
PHONE_DIGITS = 11
EDITABLE_PROFILE_FIELDS = frozenset({"name", "title", "email", "company", "phone"})

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_registration_code(value: str) -> str:
    code = (value or "").strip().upper()
    if not REGISTRATION_CODE_RE.match(code):
        raise ValidationError("Registration code must be TT followed by 6 digits")
    return code


def login_id_for(registration_code: str, domain: str) -> str:
    return f"{registration_code.lower()}@{domain}"


def normalize_phone(value: str) -> str:
    digits = re.sub(r"\D", "", value or "")
    if len(digits) != PHONE_DIGITS:
        raise ValidationError(f"Phone must have {PHONE_DIGITS} digits (area code + number)")
    return digits


def normalize_email(value: str) -> str:
    email = (value or "").strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError("Invalid email address")
    return email


def require_text(value: str | None, field: str, *, max_length: int = 256) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field} is required", field=field)
    if len(text) > max_length:
        raise ValidationError(f"{field} is too long", field=field)
    return text


def clean_profile_patch(data: dict[str, Any]) -> dict[str, Any]:
    """
    Keep only editable fields and normalize them.

    Unknown keys (status, area, registration_code, ...) are dropped silently;
    those are changed through their own operations or not at all.
    """

    out: dict[str, Any] = {}
    for key, value in data.items():
        if key not in EDITABLE_PROFILE_FIELDS:
            continue
        if key == "phone":
            out[key] = normalize_phone(str(value or ""))
        elif key == "email":
            out[key] = normalize_email(str(value or ""))
        elif key == "name":
            out[key] = require_text(value, "name")
        else:
            text = (str(value) if value is not None else "").strip()
            out[key] = text or None
    return out
