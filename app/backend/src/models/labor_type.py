"""Labor type catalog model."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.backend.src.models.base import Base, generate_uuid


class LaborType(Base):
    """A billable kind of labor with a fixed cost."""

    __tablename__ = "labor_types"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    cost: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)


__all__ = ["LaborType"]
