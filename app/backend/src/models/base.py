"""SQLAlchemy declarative base."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base for SQLAlchemy models."""

    pass


def generate_uuid() -> str:
    """Return a new string primary key."""

    return str(uuid4())


def utcnow() -> datetime:
    """Return the current UTC time as a naive timestamp."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


__all__ = ["Base", "generate_uuid", "utcnow"]
