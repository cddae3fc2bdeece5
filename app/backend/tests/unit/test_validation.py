"""Unit tests for row and inline field validation."""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

from app.backend.src.schemas.line_item import LineItem
from app.backend.src.services.validation import (
    DESCRIPTION_REQUIRED,
    LABOR_TYPE_REQUIRED,
    QUANTITY_MIN,
    REFERENCE_REQUIRED,
    SPARE_PART_REQUIRED,
    ReferencePolicy,
    validate_field,
    validate_row,
)


def _complete_row(**overrides: object) -> LineItem:
    values: dict[str, object] = {
        "id": "it-1",
        "description": "Oil change",
        "spare_part_ref": "Oil Filter",
        "quantity": 2,
        "unit_price": 50000,
        "labor_type_ref": "Basic Service",
        "labor_cost": 30000,
        "total": 130000,
    }
    values.update(overrides)
    return LineItem(**values)


def test_complete_row_has_no_violations() -> None:
    assert validate_row(_complete_row(), policy=ReferencePolicy.BOTH) == []


def test_blank_row_reports_required_fields_in_order() -> None:
    row = LineItem.blank()

    assert validate_row(row, policy=ReferencePolicy.BOTH) == [
        DESCRIPTION_REQUIRED,
        SPARE_PART_REQUIRED,
        LABOR_TYPE_REQUIRED,
    ]


def test_whitespace_description_counts_as_missing() -> None:
    violations = validate_row(_complete_row(description="   "), policy=ReferencePolicy.BOTH)

    assert violations == [DESCRIPTION_REQUIRED]


def test_zero_quantity_is_rejected_once() -> None:
    row = _complete_row(quantity=0, total=30000)

    violations = validate_row(row, policy=ReferencePolicy.BOTH)

    assert violations.count(QUANTITY_MIN) == 1


def test_either_policy_accepts_labor_only_rows() -> None:
    row = _complete_row(spare_part_ref="", unit_price=0, quantity=1, total=30000)

    assert validate_row(row, policy=ReferencePolicy.EITHER) == []
    assert validate_row(row, policy=ReferencePolicy.BOTH) == [SPARE_PART_REQUIRED]


def test_either_policy_requires_one_reference() -> None:
    row = _complete_row(spare_part_ref="", labor_type_ref="")

    assert REFERENCE_REQUIRED in validate_row(row, policy=ReferencePolicy.EITHER)


def test_mismatched_total_is_reported() -> None:
    row = _complete_row(total=1)

    violations = validate_row(row, policy=ReferencePolicy.BOTH)

    assert violations == ["Total must equal quantity * unit price + labor cost"]


def test_negative_amounts_are_reported() -> None:
    row = _complete_row(quantity=1, unit_price=-10, labor_cost=0, total=-10)

    violations = validate_row(row, policy=ReferencePolicy.BOTH)

    assert "Unit price cannot be negative" in violations
    assert "Total cannot be negative" in violations


def test_validate_row_does_not_modify_the_row() -> None:
    row = LineItem.blank()
    before = row.model_dump()

    validate_row(row, policy=ReferencePolicy.BOTH)

    assert row.model_dump() == before


def test_validate_field_returns_inline_messages() -> None:
    assert validate_field("description", "", policy=ReferencePolicy.BOTH) == DESCRIPTION_REQUIRED
    assert validate_field("description", "Brakes", policy=ReferencePolicy.BOTH) == ""
    assert validate_field("sparePartRef", " ", policy=ReferencePolicy.BOTH) == SPARE_PART_REQUIRED
    assert validate_field("labor_type_ref", "", policy=ReferencePolicy.EITHER) == ""
    assert validate_field("quantity", "0", policy=ReferencePolicy.BOTH) == QUANTITY_MIN
    assert validate_field("quantity", "3", policy=ReferencePolicy.BOTH) == ""
    assert validate_field("unit_price", -5, policy=ReferencePolicy.BOTH) == ""
