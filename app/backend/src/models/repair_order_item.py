"""Repair order line item model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.backend.src.models.base import Base, generate_uuid, utcnow


class RepairOrderItem(Base):
    """A billable spare part and/or labor charge on a repair order."""

    __tablename__ = "repair_order_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_uuid)
    repair_order_id: Mapped[str] = mapped_column(
        ForeignKey("repair_orders.id"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    spare_part_id: Mapped[str | None] = mapped_column(
        ForeignKey("spare_parts.id"), nullable=True, index=True
    )
    labor_type_id: Mapped[str | None] = mapped_column(
        ForeignKey("labor_types.id"), nullable=True, index=True
    )
    assigned_to: Mapped[str | None] = mapped_column(
        ForeignKey("employees.id"), nullable=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    labor_cost: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    repair_order: Mapped["RepairOrder"] = relationship("RepairOrder", back_populates="items")
    spare_part: Mapped["SparePart | None"] = relationship("SparePart")
    labor_type: Mapped["LaborType | None"] = relationship("LaborType")
    assigned_employee: Mapped["Employee | None"] = relationship("Employee")


__all__ = ["RepairOrderItem"]
