"""Row validation for repair order line items."""

from __future__ import annotations

from enum import Enum

from pydantic import ValidationError

from app.backend.src.core.config import get_settings
from app.backend.src.schemas.line_item import LineItem, LineItemForm

DESCRIPTION_REQUIRED = "Description is required"
SPARE_PART_REQUIRED = "Spare part is required"
LABOR_TYPE_REQUIRED = "Labor type is required"
REFERENCE_REQUIRED = "Select a spare part or a labor type"
QUANTITY_MIN = "Quantity must be at least 1"

_FIELD_LABELS: dict[str, str] = {
    "description": "Description",
    "quantity": "Quantity",
    "unit_price": "Unit price",
    "labor_cost": "Labor cost",
    "total": "Total",
}


class ReferencePolicy(str, Enum):
    """Which catalog references a row must carry."""

    BOTH = "both"
    EITHER = "either"


def default_policy() -> ReferencePolicy:
    """Return the reference policy configured for this deployment."""

    return ReferencePolicy(get_settings().line_item_reference_policy)


def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def _is_valid_quantity(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return False
    return isinstance(value, int) and value >= 1


def _schema_messages(item: LineItem) -> list[str]:
    try:
        LineItemForm.model_validate(
            item.model_dump(
                include={"description", "quantity", "unit_price", "labor_cost", "total"}
            )
        )
    except ValidationError as exc:
        messages: list[str] = []
        for error in exc.errors():
            if error["type"] == "value_error":
                messages.append(str(error["ctx"]["error"]))
            else:
                field = str(error["loc"][0]) if error["loc"] else ""
                messages.append(f"{_FIELD_LABELS.get(field, field)}: {error['msg']}")
        return messages
    return []


def validate_row(item: LineItem, *, policy: ReferencePolicy | None = None) -> list[str]:
    """Return human-readable violations for ``item``; an empty list means valid.

    Required-field checks come first, followed by any additional messages from
    :class:`LineItemForm`. The row is never modified.
    """

    policy = policy or default_policy()
    violations: list[str] = []

    if _is_blank(item.description):
        violations.append(DESCRIPTION_REQUIRED)

    if policy is ReferencePolicy.BOTH:
        if _is_blank(item.spare_part_ref):
            violations.append(SPARE_PART_REQUIRED)
        if _is_blank(item.labor_type_ref):
            violations.append(LABOR_TYPE_REQUIRED)
    elif _is_blank(item.spare_part_ref) and _is_blank(item.labor_type_ref):
        violations.append(REFERENCE_REQUIRED)

    if not _is_valid_quantity(item.quantity):
        violations.append(QUANTITY_MIN)

    for message in _schema_messages(item):
        if message not in violations:
            violations.append(message)
    return violations


def validate_field(
    field_name: str, value: object, *, policy: ReferencePolicy | None = None
) -> str:
    """Return the inline error for a single field edit, or an empty string."""

    policy = policy or default_policy()
    if field_name == "description":
        return DESCRIPTION_REQUIRED if _is_blank(value) else ""
    if field_name in {"spare_part_ref", "sparePartRef"} and policy is ReferencePolicy.BOTH:
        return SPARE_PART_REQUIRED if _is_blank(value) else ""
    if field_name in {"labor_type_ref", "laborTypeRef"} and policy is ReferencePolicy.BOTH:
        return LABOR_TYPE_REQUIRED if _is_blank(value) else ""
    if field_name == "quantity":
        return "" if _is_valid_quantity(value) else QUANTITY_MIN
    return ""


__all__ = [
    "DESCRIPTION_REQUIRED",
    "LABOR_TYPE_REQUIRED",
    "QUANTITY_MIN",
    "REFERENCE_REQUIRED",
    "ReferencePolicy",
    "SPARE_PART_REQUIRED",
    "default_policy",
    "validate_field",
    "validate_row",
]
