"""Repair order model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.models.base import Base, generate_uuid, utcnow


class RepairOrder(Base):
    """Represents a vehicle repair order opened at reception."""

    __tablename__ = "repair_orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    license_plate: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="pending")
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    items: Mapped[list["RepairOrderItem"]] = relationship(
        "RepairOrderItem",
        back_populates="repair_order",
        cascade="all, delete-orphan",
        order_by="RepairOrderItem.created_at",
    )


__all__ = ["RepairOrder"]
