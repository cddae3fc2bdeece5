"""Repair order item load and submission schemas."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.backend.src.services.calculations import ZERO, row_total, to_money


class RepairOrderItemRead(BaseModel):
    """A persisted repair order item with resolved catalog display names."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    repair_order_id: str | None = None
    description: str | None = None
    quantity: int | None = None
    unit_price: Decimal | None = None
    labor_cost: Decimal | None = None
    total_amount: Decimal | None = None
    spare_part_id: str | None = None
    spare_part_name: str | None = None
    labor_type_id: str | None = None
    labor_type_name: str | None = None
    assigned_to: str | None = None
    assigned_employee_name: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _flatten_joined_references(cls, data: Any) -> Any:
        """Accept joined records shaped like ``{"spare_part": {"id", "name"}}``."""

        if not isinstance(data, Mapping):
            return data
        flattened = dict(data)
        for relation, id_key, name_key, label in (
            ("spare_part", "spare_part_id", "spare_part_name", "name"),
            ("labor_type", "labor_type_id", "labor_type_name", "name"),
            ("assigned_employee", "assigned_to", "assigned_employee_name", "full_name"),
        ):
            joined = flattened.pop(relation, None)
            if isinstance(joined, Mapping):
                if flattened.get(name_key) is None:
                    flattened[name_key] = joined.get(label)
                if flattened.get(id_key) is None:
                    flattened[id_key] = joined.get("id")
        return flattened


class RepairOrderItemWrite(BaseModel):
    """Normalized item payload sent for insertion."""

    description: str
    spare_part_id: str | None = None
    quantity: int = Field(ge=1)
    unit_price: Decimal = ZERO
    labor_type_id: str | None = None
    labor_cost: Decimal = ZERO
    total_amount: Decimal = ZERO
    assigned_to: str | None = None

    @field_validator("unit_price", "labor_cost", "total_amount", mode="before")
    @classmethod
    def _coerce_money(cls, value: object) -> Decimal:
        return to_money(value)

    @field_validator("unit_price", "labor_cost", "total_amount")
    @classmethod
    def _non_negative(cls, value: Decimal) -> Decimal:
        if value < 0:
            raise ValueError("Amounts cannot be negative")
        return value

    @model_validator(mode="after")
    def _total_matches_components(self) -> "RepairOrderItemWrite":
        expected = row_total(self.quantity, self.unit_price, self.labor_cost)
        if self.total_amount != expected:
            raise ValueError(
                f"total_amount {self.total_amount} does not match "
                f"quantity * unit_price + labor_cost ({expected})"
            )
        return self


class RepairOrderItemUpdate(RepairOrderItemWrite):
    """Normalized item payload sent to overwrite a persisted item."""

    id: str


class RepairOrderChanges(BaseModel):
    """Reconciled operation set for one repair order."""

    model_config = ConfigDict(populate_by_name=True)

    new_items: list[RepairOrderItemWrite] = Field(default_factory=list, alias="newItems")
    updated_items: list[RepairOrderItemUpdate] = Field(
        default_factory=list, alias="updatedItems"
    )
    deleted_item_ids: list[str] = Field(default_factory=list, alias="deletedItemIds")

    @model_validator(mode="after")
    def _disjoint_operations(self) -> "RepairOrderChanges":
        updated_ids = {item.id for item in self.updated_items}
        if len(updated_ids) != len(self.updated_items):
            raise ValueError("An item may only be updated once per submission")
        overlap = updated_ids.intersection(self.deleted_item_ids)
        if overlap:
            raise ValueError(
                "Items cannot be both updated and deleted: " + ", ".join(sorted(overlap))
            )
        return self


class RepairOrderSubmission(BaseModel):
    """Order total plus the reconciled operation set."""

    model_config = ConfigDict(populate_by_name=True)

    total_amount: Decimal = Field(alias="totalAmount")
    changes: RepairOrderChanges = Field(default_factory=RepairOrderChanges)

    @field_validator("total_amount", mode="before")
    @classmethod
    def _coerce_total(cls, value: object) -> Decimal:
        return to_money(value)

    @model_validator(mode="after")
    def _total_matches_items(self) -> "RepairOrderSubmission":
        items_total = sum(
            (item.total_amount for item in self.changes.new_items),
            ZERO,
        ) + sum((item.total_amount for item in self.changes.updated_items), ZERO)
        if self.total_amount != items_total:
            raise ValueError(
                f"totalAmount {self.total_amount} does not match the item totals ({items_total})"
            )
        return self


class SubmissionResult(BaseModel):
    """Outcome of applying a submission."""

    repair_order_id: str
    total_amount: Decimal
    inserted_ids: list[str] = Field(default_factory=list)
    updated_ids: list[str] = Field(default_factory=list)
    deleted_ids: list[str] = Field(default_factory=list)


class SubmissionFailure(BaseModel):
    """Error body returned when a submission stage fails."""

    stage: str
    message: str
    rolled_back: bool = True


__all__ = [
    "RepairOrderChanges",
    "RepairOrderItemRead",
    "RepairOrderItemUpdate",
    "RepairOrderItemWrite",
    "RepairOrderSubmission",
    "SubmissionFailure",
    "SubmissionResult",
]
