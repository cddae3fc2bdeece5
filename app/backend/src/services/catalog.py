"""Catalog reference data and monthly usage limits."""

from __future__ import annotations

from datetime import date, datetime

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.backend.src.core.config import Settings, get_settings
from app.backend.src.models import Employee, LaborType, RepairOrderItem, SparePart
from app.backend.src.schemas.catalog import (
    Catalog,
    EmployeeRead,
    LaborTypeRead,
    SparePartRead,
    UsageCheck,
)

LOGGER = structlog.get_logger(__name__)


def fetch_catalog(session: Session) -> Catalog:
    """Return spare parts, labor types and active employees ordered by name."""

    spare_parts = session.scalars(select(SparePart).order_by(SparePart.name.asc())).all()
    labor_types = session.scalars(select(LaborType).order_by(LaborType.name.asc())).all()
    employees = session.scalars(
        select(Employee)
        .where(Employee.is_active.is_(True))
        .order_by(Employee.full_name.asc())
    ).all()
    return Catalog(
        spare_parts=[SparePartRead.model_validate(part) for part in spare_parts],
        labor_types=[LaborTypeRead.model_validate(labor) for labor in labor_types],
        employees=[EmployeeRead.model_validate(employee) for employee in employees],
    )


def month_bounds(today: date) -> tuple[datetime, datetime]:
    """Return the ``[start, end)`` timestamps of the calendar month containing ``today``."""

    start = datetime(today.year, today.month, 1)
    if today.month == 12:
        end = datetime(today.year + 1, 1, 1)
    else:
        end = datetime(today.year, today.month + 1, 1)
    return start, end


def count_monthly_usage(session: Session, *, today: date | None = None) -> tuple[int, int]:
    """Return how many items created this month reference a part and a labor type."""

    start, end = month_bounds(today or date.today())
    in_month = (RepairOrderItem.created_at >= start, RepairOrderItem.created_at < end)
    part_usage = session.scalar(
        select(func.count(RepairOrderItem.id)).where(
            RepairOrderItem.spare_part_id.is_not(None), *in_month
        )
    )
    labor_usage = session.scalar(
        select(func.count(RepairOrderItem.id)).where(
            RepairOrderItem.labor_type_id.is_not(None), *in_month
        )
    )
    return int(part_usage or 0), int(labor_usage or 0)


def check_monthly_usage(
    session: Session,
    spare_part_id: str | None = None,
    labor_type_id: str | None = None,
    *,
    settings: Settings | None = None,
    today: date | None = None,
) -> UsageCheck:
    """Check whether selecting the given part and/or labor type stays within limits.

    A limit of zero disables that check.
    """

    settings = settings or get_settings()
    max_parts = settings.max_parts_per_month
    max_labor = settings.max_labor_types_per_month
    part_usage, labor_usage = count_monthly_usage(session, today=today)

    result = UsageCheck(
        part_usage=part_usage,
        labor_usage=labor_usage,
        max_parts_per_month=max_parts,
        max_labor_types_per_month=max_labor,
    )
    if spare_part_id and max_parts > 0 and part_usage >= max_parts:
        result.can_add_part = False
        result.messages.append(
            f"Monthly spare part limit reached ({part_usage}/{max_parts})"
        )
    if labor_type_id and max_labor > 0 and labor_usage >= max_labor:
        result.can_add_labor = False
        result.messages.append(
            f"Monthly labor type limit reached ({labor_usage}/{max_labor})"
        )

    if not result.allowed:
        LOGGER.info(
            "usage_limit_blocked",
            spare_part_id=spare_part_id,
            labor_type_id=labor_type_id,
            part_usage=part_usage,
            labor_usage=labor_usage,
        )
    return result


__all__ = [
    "check_monthly_usage",
    "count_monthly_usage",
    "fetch_catalog",
    "month_bounds",
]
