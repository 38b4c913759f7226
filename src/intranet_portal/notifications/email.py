"""
intranet_portal.notifications.email

Email delivery boundary.

Responsibilities:
- Define the `EmailSender` interface used for credential and signup notifications.
- Deliver through the Resend HTTP API with a shared `httpx.AsyncClient`.
- Provide a disabled sender that fails loudly when no API key is configured.
"""

from __future__ import annotations

from typing import Protocol

import httpx

from intranet_portal.observability.logging import get_logger

log = get_logger(__name__)


class EmailDeliveryError(Exception):
    pass


class EmailSender(Protocol):
    async def send(self, *, to: str, subject: str, html: str) -> None: ...


class ResendEmailSender:
    def __init__(
        self,
        *,
        http: httpx.AsyncClient,
        api_key: str,
        sender: str,
        api_url: str = "https://api.resend.com/emails",
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._sender = sender
        self._api_url = api_url

    async def send(self, *, to: str, subject: str, html: str) -> None:
        try:
            r = await self._http.post(
                self._api_url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={"from": self._sender, "to": [to], "subject": subject, "html": html},
            )
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Email API unreachable: {e}") from e
        if r.status_code >= 400:
            raise EmailDeliveryError(f"Email API failed [{r.status_code}]: {r.text}")
        log.info("email.sent", to=to, subject=subject)


class DisabledEmailSender:
    async def send(self, *, to: str, subject: str, html: str) -> None:
        raise EmailDeliveryError("Email delivery is not configured")


# --- Module Notes -----------------------------------------------------------
# Delivery is a side channel: callers report EmailDeliveryError to the client
# but never roll back the state change that triggered the email.
