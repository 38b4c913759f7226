"""
intranet_portal.api.schemas

Request/response models shared by the routers.

Responsibilities:
- Use camelCase on the wire (`userId`, `mustChangePassword`) and snake_case in Python.
- Serialize ORM rows into API payloads.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from intranet_portal.db.models import Profile, ReportLink, Visit


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProfileOut(ApiModel):
    user_id: uuid.UUID
    registration_code: str
    name: str
    title: str | None = None
    email: str | None = None
    company: str | None = None
    phone: str | None = None
    area: str | None = None
    status: str
    must_change_password: bool
    created_at: datetime

    @classmethod
    def from_row(cls, p: Profile) -> ProfileOut:
        return cls(
            user_id=p.user_id,
            registration_code=p.registration_code,
            name=p.name,
            title=p.title,
            email=p.email,
            company=p.company,
            phone=p.phone,
            area=p.area,
            status=p.status.value,
            must_change_password=p.must_change_password,
            created_at=p.created_at,
        )


class ReportOut(ApiModel):
    id: uuid.UUID
    title: str
    description: str | None = None
    url: str
    icon: str | None = None
    order: int
    active: bool

    @classmethod
    def from_row(cls, r: ReportLink) -> ReportOut:
        return cls(
            id=r.id,
            title=r.title,
            description=r.description,
            url=r.url,
            icon=r.icon,
            order=r.order,
            active=r.active,
        )


class VisitOut(ApiModel):
    id: uuid.UUID
    place: str
    notes: str | None = None
    visit_date: date
    signature: str | None = None
    status: str
    created_at: datetime

    @classmethod
    def from_row(cls, v: Visit) -> VisitOut:
        return cls(
            id=v.id,
            place=v.place,
            notes=v.notes,
            visit_date=v.visit_date,
            signature=v.signature,
            status=v.status.value,
            created_at=v.created_at,
        )
