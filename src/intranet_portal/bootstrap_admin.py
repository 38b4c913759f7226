"""
intranet_portal.bootstrap_admin

Create (or recreate) the first admin account: `python -m intranet_portal.bootstrap_admin`.

Responsibilities:
- Optionally remove a previous admin (portal rows + identity).
- Create an identity, an active profile that must change its password, and the admin role.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import uuid
from datetime import timedelta

from intranet_portal.accounts.validation import (
    login_id_for,
    normalize_email,
    normalize_phone,
    normalize_registration_code,
    require_text,
)
from intranet_portal.auth.identity import LocalIdentityProvider
from intranet_portal.auth.jwt import JwtConfig
from intranet_portal.auth.passwords import validate_password
from intranet_portal.db.init_db import init_db
from intranet_portal.db.models import AppRole, ProfileStatus
from intranet_portal.db.repositories.activity import ActivityRepo
from intranet_portal.db.repositories.profiles import ProfileRepo
from intranet_portal.db.repositories.roles import RoleRepo
from intranet_portal.db.session import create_engine, create_sessionmaker
from intranet_portal.errors import NotFound, PortalError
from intranet_portal.observability.logging import configure_logging, get_logger
from intranet_portal.settings import Settings, get_settings

log = get_logger(__name__)


async def bootstrap(
    *,
    settings: Settings,
    registration_code: str,
    name: str,
    email: str,
    company: str | None,
    phone: str | None,
    password: str,
    replace_user_id: uuid.UUID | None = None,
) -> uuid.UUID:
    code = normalize_registration_code(registration_code)
    name = require_text(name, "name")
    email = normalize_email(email)
    phone = normalize_phone(phone) if phone else None
    validate_password(password)

    engine = create_engine(settings)
    try:
        if settings.env in ("dev", "test"):
            await init_db(engine)
        session_factory = create_sessionmaker(engine)
        identity = LocalIdentityProvider(
            session_factory=session_factory,
            jwt_cfg=JwtConfig.from_settings(settings),
            session_ttl=timedelta(minutes=settings.session_ttl_minutes),
        )

        if replace_user_id is not None:
            async with session_factory() as session:
                await RoleRepo(session).delete_for_user(replace_user_id)
                await ActivityRepo(session).delete_presence(replace_user_id)
                await ProfileRepo(session).delete_for_user(replace_user_id)
                await session.commit()
            try:
                await identity.admin_delete_identity(replace_user_id)
            except NotFound:
                log.warning("bootstrap.old_identity_missing", user_id=str(replace_user_id))
            log.info("bootstrap.removed", user_id=str(replace_user_id))

        user_id = await identity.admin_create_identity(
            login_id_for(code, settings.login_email_domain),
            password,
            {"name": name, "registration_code": code},
        )
        async with session_factory() as session:
            await ProfileRepo(session).create(
                user_id=user_id,
                registration_code=code,
                name=name,
                email=email,
                company=company,
                phone=phone,
                status=ProfileStatus.active,
                must_change_password=True,
            )
            await RoleRepo(session).grant(user_id, AppRole.admin)
            await session.commit()
        log.info("bootstrap.created", user_id=str(user_id), registration_code=code)
        return user_id
    finally:
        await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the initial portal admin.")
    parser.add_argument("--registration-code", required=True, help="TT followed by 6 digits")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--company", default=None)
    parser.add_argument("--phone", default=None)
    parser.add_argument(
        "--replace-user-id",
        type=uuid.UUID,
        default=None,
        help="delete this user (rows and identity) before creating the new admin",
    )
    args = parser.parse_args()

    password = os.environ.get("PORTAL_BOOTSTRAP_PASSWORD", "").strip()
    if not password:
        raise SystemExit("PORTAL_BOOTSTRAP_PASSWORD is required")

    settings = get_settings()
    configure_logging(service_name=settings.service_name, level=settings.log_level)
    try:
        user_id = asyncio.run(
            bootstrap(
                settings=settings,
                registration_code=args.registration_code,
                name=args.name,
                email=args.email,
                company=args.company,
                phone=args.phone,
                password=password,
                replace_user_id=args.replace_user_id,
            )
        )
    except PortalError as e:
        raise SystemExit(f"bootstrap failed: {e.message}") from e
    print(user_id)


if __name__ == "__main__":
    main()
