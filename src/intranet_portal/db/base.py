"""
intranet_portal.db.base

SQLAlchemy declarative base shared by every portal table.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
