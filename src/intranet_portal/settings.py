"""
intranet_portal.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (JWT secret, email API key, fallback password).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `PORTAL_`).
    Defaults are safe for local dev; prod must override every secret.
    """

    model_config = SettingsConfigDict(env_prefix="PORTAL_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "intranet-portal"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Session tokens issued by the local identity provider
    jwt_alg: str = "HS256"
    jwt_issuer: str = "intranet-portal"
    jwt_audience: str = "intranet-portal-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    session_ttl_minutes: int = 8 * 60

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./portal.db"

    # Identity provider login ids are derived as `<registration code>@<domain>`.
    login_email_domain: str = "empresa.local"

    # Recovery credential used by admin resets when the target has no email on file.
    fallback_password: str = Field(default="Portal@123", repr=False)

    # Email delivery (Resend HTTP API)
    resend_api_key: str | None = Field(default=None, repr=False)
    resend_api_url: str = "https://api.resend.com/emails"
    email_sender: str = "Portal Corporativo <onboarding@resend.dev>"
    admin_notify_email: str | None = None
    email_timeout_seconds: float = 10.0

    # Observability views
    presence_online_window_seconds: int = 120
    analytics_log_limit: int = 100

    seed_default_area_permissions: bool = True


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# `fallback_password` is a documented, well-known credential: accounts reset to it
# always carry must_change_password=True, so it is only good for one login.
