"""Catalog reference schemas for spare parts, labor types and employees."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class SparePartRead(BaseModel):
    """A selectable spare part with its catalog price."""

    id: str
    name: str
    price: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True, frozen=True)


class LaborTypeRead(BaseModel):
    """A selectable labor type with its fixed cost."""

    id: str
    name: str
    cost: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True, frozen=True)


class EmployeeRead(BaseModel):
    """An employee that line items can be assigned to."""

    id: str
    full_name: str
    role: str = ""

    model_config = ConfigDict(from_attributes=True, frozen=True)


class Catalog(BaseModel):
    """Reference data used to populate selection fields.

    Lookups by id are the canonical resolution path. The name lookups exist
    for selection widgets that only report the chosen label; they return the
    first match, so duplicate names resolve to the earliest catalog entry.
    """

    spare_parts: list[SparePartRead] = Field(default_factory=list)
    labor_types: list[LaborTypeRead] = Field(default_factory=list)
    employees: list[EmployeeRead] = Field(default_factory=list)

    def spare_part(self, part_id: str | None) -> SparePartRead | None:
        if not part_id:
            return None
        return next((part for part in self.spare_parts if part.id == part_id), None)

    def labor_type(self, labor_id: str | None) -> LaborTypeRead | None:
        if not labor_id:
            return None
        return next((labor for labor in self.labor_types if labor.id == labor_id), None)

    def employee(self, employee_id: str | None) -> EmployeeRead | None:
        if not employee_id:
            return None
        return next(
            (employee for employee in self.employees if employee.id == employee_id),
            None,
        )

    def find_spare_part_by_name(self, name: str) -> SparePartRead | None:
        cleaned = (name or "").strip()
        return next((part for part in self.spare_parts if part.name == cleaned), None)

    def find_labor_type_by_name(self, name: str) -> LaborTypeRead | None:
        cleaned = (name or "").strip()
        return next((labor for labor in self.labor_types if labor.name == cleaned), None)


class UsageCheck(BaseModel):
    """Outcome of a monthly usage-limit check for a catalog selection."""

    can_add_part: bool = True
    can_add_labor: bool = True
    part_usage: int = 0
    labor_usage: int = 0
    max_parts_per_month: int = 0
    max_labor_types_per_month: int = 0
    messages: list[str] = Field(default_factory=list)

    @property
    def allowed(self) -> bool:
        """Return ``True`` when neither limit blocks the selection."""

        return self.can_add_part and self.can_add_labor


__all__ = [
    "Catalog",
    "EmployeeRead",
    "LaborTypeRead",
    "SparePartRead",
    "UsageCheck",
]
