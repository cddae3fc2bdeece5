"""Repair order line item schemas used while editing an order."""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.backend.src.services.calculations import ZERO, row_total, to_money

TEMP_ID_PREFIX = "temp-"
DESCRIPTION_MAX_LENGTH = 500


def new_temp_id() -> str:
    """Return a fresh identifier for a row that has not been persisted yet."""

    return f"{TEMP_ID_PREFIX}{uuid4().hex}"


def is_unsaved_id(item_id: str | None) -> bool:
    """Return ``True`` when ``item_id`` marks a row created in this session."""

    return not item_id or item_id.startswith(TEMP_ID_PREFIX)


class LineItem(BaseModel):
    """One billable row on a repair order: a spare part, labor, or both.

    Rows are immutable; edits produce a new row through
    :func:`app.backend.src.services.line_item_store.apply_field_update`.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str | None = None
    description: str = ""
    spare_part_ref: str = ""
    spare_part_id: str | None = None
    quantity: int = 1
    unit_price: Decimal = ZERO
    labor_type_ref: str = ""
    labor_type_id: str | None = None
    labor_cost: Decimal = ZERO
    total: Decimal = ZERO
    assigned_to_ref: str = ""
    assigned_to_id: str | None = None

    @field_validator("unit_price", "labor_cost", "total", mode="before")
    @classmethod
    def _coerce_money(cls, value: object) -> Decimal:
        return to_money(value)

    @property
    def is_persisted(self) -> bool:
        return not is_unsaved_id(self.id)

    @property
    def expected_total(self) -> Decimal:
        return row_total(self.quantity, self.unit_price, self.labor_cost)

    @classmethod
    def blank(cls) -> "LineItem":
        """Return a new, not-yet-persisted row in its default state."""

        return cls(id=new_temp_id())

    def is_blank(self) -> bool:
        """Return ``True`` when the row still holds only default values."""

        return (
            not self.description
            and not self.spare_part_ref
            and not self.labor_type_ref
            and self.quantity == 1
            and self.unit_price == ZERO
            and self.labor_cost == ZERO
        )


class LineItemForm(BaseModel):
    """Declarative constraints applied to a row before it may leave edit mode."""

    description: str = ""
    quantity: int
    unit_price: Decimal
    labor_cost: Decimal
    total: Decimal

    @field_validator("description")
    @classmethod
    def _description_length(cls, value: str) -> str:
        if len(value) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters"
            )
        return value

    @field_validator("quantity")
    @classmethod
    def _positive_quantity(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Quantity must be at least 1")
        return value

    @field_validator("unit_price")
    @classmethod
    def _non_negative_price(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("Unit price cannot be negative")
        return value

    @field_validator("labor_cost")
    @classmethod
    def _non_negative_labor(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("Labor cost cannot be negative")
        return value

    @field_validator("total")
    @classmethod
    def _non_negative_total(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("Total cannot be negative")
        return value

    @model_validator(mode="after")
    def _total_matches_components(self) -> "LineItemForm":
        if self.total != row_total(self.quantity, self.unit_price, self.labor_cost):
            raise ValueError("Total must equal quantity * unit price + labor cost")
        return self


__all__ = [
    "DESCRIPTION_MAX_LENGTH",
    "LineItem",
    "LineItemForm",
    "TEMP_ID_PREFIX",
    "is_unsaved_id",
    "new_temp_id",
]
