"""
intranet_portal.db.models

Persistence schema for the portal.

Responsibilities:
- Define ORM models for the portal's own records:
  - Profile / UserRole: account status, contact data and role assignments
  - AreaPermission / ReportLink: per-area visibility configuration
  - AccessLog / UserPresence: observability trail and heartbeat
  - Visit: field visit log with signature
- Define the identity tables owned by the local identity provider
  (Identity / AuthSession), kept separate from portal records.
"""

from __future__ import annotations

import enum
import uuid
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid as SAUuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from intranet_portal.db.base import Base


def utcnow() -> datetime:
    # Naive UTC timestamps: SQLite drops tzinfo, so keep every comparison naive.
    return datetime.now(tz=UTC).replace(tzinfo=None)


class ProfileStatus(enum.StrEnum):
    pending = "pending"
    active = "active"
    blocked = "blocked"


class AppRole(enum.StrEnum):
    admin = "admin"
    user = "user"


class VisitStatus(enum.StrEnum):
    completed = "completed"


class Identity(Base):
    __tablename__ = "identities"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    login: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    user_metadata: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    identity_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True),
        ForeignKey("identities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    revoked_at: Mapped[datetime | None] = mapped_column(nullable=True)


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Identity ref issued by the auth provider; no FK so the provider stays swappable.
    user_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False, unique=True)
    registration_code: Mapped[str] = mapped_column(String(8), nullable=False, unique=True)

    name: Mapped[str] = mapped_column(String(256), nullable=False)
    title: Mapped[str | None] = mapped_column(String(128), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    company: Mapped[str | None] = mapped_column(String(256), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    area: Mapped[str | None] = mapped_column(String(128), nullable=True)

    status: Mapped[ProfileStatus] = mapped_column(
        Enum(ProfileStatus), nullable=False, default=ProfileStatus.pending, index=True
    )
    must_change_password: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)


class UserRole(Base):
    __tablename__ = "user_roles"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False, index=True)
    role: Mapped[AppRole] = mapped_column(Enum(AppRole), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)


class AreaPermission(Base):
    __tablename__ = "area_permissions"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    area: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    modules: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    report_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    all_access: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)


class ReportLink(Base):
    __tablename__ = "powerbi_links"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    order: Mapped[int] = mapped_column("ordem", Integer, nullable=False, default=0)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)


class AccessLog(Base):
    __tablename__ = "access_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False, default="page_view")
    page: Mapped[str | None] = mapped_column(String(256), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)


class UserPresence(Base):
    __tablename__ = "user_presence"

    user_id: Mapped[uuid.UUID] = mapped_column(SAUuid(as_uuid=True), primary_key=True)
    last_seen_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    current_page: Mapped[str | None] = mapped_column(String(256), nullable=True)


class Visit(Base):
    __tablename__ = "visits"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    supervisor_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), nullable=False, index=True
    )
    place: Mapped[str] = mapped_column(String(256), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    visit_date: Mapped[date] = mapped_column(Date, nullable=False)
    # PNG data URL captured from the signature pad.
    signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[VisitStatus] = mapped_column(
        Enum(VisitStatus), nullable=False, default=VisitStatus.completed
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("ix_visits_supervisor_date", "supervisor_id", "visit_date"),)


# --- Module Notes -----------------------------------------------------------
# Profile, role and presence rows reference identities by id only. Deleting a user
# removes portal rows first and the identity last (see `gateway.admin_actions`).
