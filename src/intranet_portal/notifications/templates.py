from __future__ import annotations

from datetime import datetime
from html import escape

_WRAPPER = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
    "{body}</div>"
)


def new_password_email(*, name: str, password: str, reason: str) -> tuple[str, str]:
    subject = "New password - Corporate Portal"
    body = (
        f"<h2>{escape(reason)}</h2>"
        f"<p>Hello, <strong>{escape(name)}</strong>!</p>"
        "<p>Your temporary password is:</p>"
        f'<p style="font-size: 24px; font-weight: bold; letter-spacing: 2px;">'
        f"<code>{escape(password)}</code></p>"
        "<p>You will be asked to choose a new password on your next login.</p>"
        "<p style=\"color: #999; font-size: 12px;\">"
        "If you did not request this change, contact the administrator.</p>"
    )
    return subject, _WRAPPER.format(body=body)


def new_user_pending_email(
    *, name: str, registration_code: str, requested_at: datetime
) -> tuple[str, str]:
    subject = "New user awaiting approval - Corporate Portal"
    body = (
        "<h2>New user awaiting approval</h2>"
        f"<p><strong>Name:</strong> {escape(name)}</p>"
        f"<p><strong>Registration code:</strong> {escape(registration_code)}</p>"
        f"<p><strong>Requested at (UTC):</strong> {requested_at:%Y-%m-%d %H:%M}</p>"
        "<p>Open the Corporate Portal to approve or block this user.</p>"
    )
    return subject, _WRAPPER.format(body=body)
