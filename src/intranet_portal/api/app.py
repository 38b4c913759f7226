"""
intranet_portal.api.app

FastAPI app factory for the intranet portal service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine/session factory,
  identity provider, email HTTP client).
- Translate domain errors into `{"error", "code", ...}` responses.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from intranet_portal import __version__
from intranet_portal.api.routers.activity import router as activity_router
from intranet_portal.api.routers.admin import router as admin_router
from intranet_portal.api.routers.admin_actions import router as admin_actions_router
from intranet_portal.api.routers.admin_reports import router as admin_reports_router
from intranet_portal.api.routers.auth import router as auth_router
from intranet_portal.api.routers.health import router as health_router
from intranet_portal.api.routers.me import router as me_router
from intranet_portal.api.routers.reports import router as reports_router
from intranet_portal.api.routers.visits import router as visits_router
from intranet_portal.auth.identity import LocalIdentityProvider
from intranet_portal.auth.jwt import JwtConfig
from intranet_portal.db.init_db import init_db
from intranet_portal.db.repositories.area_permissions import AreaPermissionRepo
from intranet_portal.db.session import create_engine, create_sessionmaker
from intranet_portal.errors import PortalError
from intranet_portal.notifications.email import DisabledEmailSender, ResendEmailSender
from intranet_portal.observability.logging import configure_logging, get_logger
from intranet_portal.observability.middleware import RequestContextMiddleware
from intranet_portal.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod should use Alembic migrations.
            await init_db(engine)
        if settings.seed_default_area_permissions:
            async with app.state.sessionmaker() as session:
                seeded = await AreaPermissionRepo(session).seed_missing_defaults()
                await session.commit()
            if seeded:
                log.info("area_permissions.seeded", areas=[a.value for a in seeded])

        app.state.identity = LocalIdentityProvider(
            session_factory=app.state.sessionmaker,
            jwt_cfg=JwtConfig.from_settings(settings),
            session_ttl=timedelta(minutes=settings.session_ttl_minutes),
        )

        http = httpx.AsyncClient(timeout=settings.email_timeout_seconds)
        app.state.http = http
        if settings.resend_api_key:
            app.state.email = ResendEmailSender(
                http=http,
                api_key=settings.resend_api_key,
                sender=settings.email_sender,
                api_url=settings.resend_api_url,
            )
        else:
            log.warning("email.disabled", reason="PORTAL_RESEND_API_KEY not set")
            app.state.email = DisabledEmailSender()

        try:
            yield
        finally:
            await http.aclose()
            # Dispose the engine to close pools/FDs gracefully.
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Intranet Portal",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    @app.exception_handler(PortalError)
    async def _portal_error(request: Request, exc: PortalError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error("request.failed", code=exc.code, error=exc.message, **exc.details)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "code": exc.code, **exc.details},
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = first.get("msg", "Invalid request")
        return JSONResponse(
            status_code=400,
            content={
                "error": f"{where}: {message}" if where else message,
                "code": "validation_error",
            },
        )

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(me_router)
    app.include_router(reports_router)
    app.include_router(activity_router)
    app.include_router(visits_router)
    app.include_router(admin_actions_router)
    app.include_router(admin_router)
    app.include_router(admin_reports_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Collaborators live on app.state so tests can swap them after startup
# (e.g. a failing email sender or identity provider).
