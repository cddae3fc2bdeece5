"""Utilities for seeding development data."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.backend.src.models import Employee, LaborType, RepairOrder, RepairOrderItem, SparePart
from app.backend.src.services.calculations import row_total

DEFAULT_SPARE_PARTS: tuple[tuple[str, str], ...] = (
    ("Oil filter", "45000"),
    ("Brake pads (front)", "120000"),
    ("Spark plug", "18000"),
)
DEFAULT_LABOR_TYPES: tuple[tuple[str, str], ...] = (
    ("Oil change", "30000"),
    ("Brake service", "80000"),
)
DEFAULT_EMPLOYEE_NAME = "Demo Technician"
DEFAULT_LICENSE_PLATE = "DEMO-001"


@dataclass
class SeedResult:
    """Information about the seeded catalog and demo repair order."""

    repair_order: RepairOrder
    spare_parts: list[SparePart] = field(default_factory=list)
    labor_types: list[LaborType] = field(default_factory=list)
    employee: Employee | None = None
    repair_order_created: bool = False


def _get_or_create_part(session: Session, name: str, price: str) -> SparePart:
    part = session.scalars(select(SparePart).where(SparePart.name == name)).first()
    if part is None:
        part = SparePart(name=name, price=Decimal(price), stock_quantity=10)
        session.add(part)
        session.flush()
    return part


def _get_or_create_labor(session: Session, name: str, cost: str) -> LaborType:
    labor = session.scalars(select(LaborType).where(LaborType.name == name)).first()
    if labor is None:
        labor = LaborType(name=name, cost=Decimal(cost))
        session.add(labor)
        session.flush()
    return labor


def seed_development_data(
    session: Session,
    *,
    license_plate: str = DEFAULT_LICENSE_PLATE,
    employee_name: str = DEFAULT_EMPLOYEE_NAME,
) -> SeedResult:
    """Ensure a demo catalog and a repair order with two items exist.

    Existing rows are reused so the seed can run repeatedly.
    """

    parts = [_get_or_create_part(session, name, price) for name, price in DEFAULT_SPARE_PARTS]
    labors = [_get_or_create_labor(session, name, cost) for name, cost in DEFAULT_LABOR_TYPES]

    employee = session.scalars(
        select(Employee).where(Employee.full_name == employee_name)
    ).first()
    if employee is None:
        employee = Employee(full_name=employee_name, role="technician")
        session.add(employee)
        session.flush()

    order = session.scalars(
        select(RepairOrder).where(RepairOrder.license_plate == license_plate)
    ).first()
    created = False
    if order is None:
        order = RepairOrder(license_plate=license_plate, customer_name="Demo Customer")
        session.add(order)
        session.flush()
        items = [
            RepairOrderItem(
                repair_order_id=order.id,
                description=description,
                spare_part_id=part.id,
                labor_type_id=labor.id,
                assigned_to=employee.id,
                quantity=quantity,
                unit_price=part.price,
                labor_cost=labor.cost,
                total_amount=row_total(quantity, part.price, labor.cost),
            )
            for part, labor, quantity, description in (
                (parts[0], labors[0], 1, "Replace oil filter"),
                (parts[1], labors[1], 2, "Replace front brake pads"),
            )
        ]
        session.add_all(items)
        order.total_amount = sum((item.total_amount for item in items), Decimal("0"))
        session.flush()
        created = True

    return SeedResult(
        repair_order=order,
        spare_parts=parts,
        labor_types=labors,
        employee=employee,
        repair_order_created=created,
    )


__all__ = ["SeedResult", "seed_development_data"]
