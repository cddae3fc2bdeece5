"""Unit tests for the line item working-set store."""

from __future__ import annotations

import sys
from decimal import Decimal
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

import pytest

from app.backend.src.core.errors import (
    InvalidFieldValueError,
    LineItemLoadError,
    ReadOnlyFieldError,
    UnknownFieldError,
)
from app.backend.src.schemas.catalog import EmployeeRead, LaborTypeRead, SparePartRead
from app.backend.src.schemas.line_item import TEMP_ID_PREFIX, LineItem
from app.backend.src.services.line_item_store import (
    LineItemStore,
    apply_field_update,
    line_item_from_record,
)


def _record(item_id: str, **overrides: object) -> dict[str, object]:
    record: dict[str, object] = {
        "id": item_id,
        "description": f"Item {item_id}",
        "quantity": 1,
        "unit_price": "40000",
        "labor_cost": "0",
        "total_amount": "40000",
        "spare_part": {"id": "sp-1", "name": "Brake Pad"},
        "labor_type": {"id": "lt-1", "name": "Brake Service"},
    }
    record.update(overrides)
    return record


def _store_with(*records: dict[str, object]) -> LineItemStore:
    store = LineItemStore(lambda _order_id: list(records))
    store.load_existing_items("ro-1")
    return store


def test_load_existing_items_populates_current_and_original() -> None:
    store = _store_with(_record("it-1"), _record("it-2"))

    assert [item.id for item in store.items] == ["it-1", "it-2"]
    assert set(store.original) == {"it-1", "it-2"}
    assert store.deleted_item_ids == ()
    assert store.repair_order_id == "ro-1"
    first = store.row(0)
    assert first.spare_part_ref == "Brake Pad"
    assert first.spare_part_id == "sp-1"
    assert first.labor_type_ref == "Brake Service"


def test_load_recomputes_stale_totals_and_defaults_quantity() -> None:
    store = _store_with(_record("it-1", quantity=None, total_amount="100000"))

    row = store.row(0)
    assert row.quantity == 1
    assert row.total == Decimal("40000.00")


def test_load_failure_leaves_state_untouched() -> None:
    calls = {"count": 0}

    def _fetch(_order_id: str) -> list[dict[str, object]]:
        calls["count"] += 1
        if calls["count"] > 1:
            raise ConnectionError("backend unavailable")
        return [_record("it-1")]

    store = LineItemStore(_fetch)
    store.load_existing_items("ro-1")
    store.update_field(0, "description", "Edited")

    with pytest.raises(LineItemLoadError) as excinfo:
        store.load_existing_items("ro-1")

    assert excinfo.value.repair_order_id == "ro-1"
    assert store.row(0).description == "Edited"
    assert set(store.original) == {"it-1"}


def test_load_rejects_duplicate_ids() -> None:
    store = LineItemStore(lambda _order_id: [_record("it-1"), _record("it-1")])

    with pytest.raises(LineItemLoadError):
        store.load_existing_items("ro-1")

    assert len(store) == 0


def test_add_row_appends_blank_unsaved_row() -> None:
    store = _store_with(_record("it-1"))

    row, index = store.add_row()

    assert index == 1
    assert row.id.startswith(TEMP_ID_PREFIX)
    assert row.quantity == 1
    assert row.total == Decimal("0.00")
    assert row.is_blank()
    assert "it-1" in store.original and row.id not in store.original


def test_add_row_ids_are_unique() -> None:
    store = LineItemStore()

    ids = {store.add_row()[0].id for _ in range(50)}

    assert len(ids) == 50


def test_update_field_keeps_total_consistent() -> None:
    store = _store_with(_record("it-1"))

    store.update_field(0, "quantity", "3")
    store.update_field(0, "laborCost", "15000")

    row = store.row(0)
    assert row.quantity == 3
    assert row.total == Decimal("135000.00")
    assert row.total == row.expected_total


def test_update_field_rejects_read_only_and_unknown_fields() -> None:
    store = _store_with(_record("it-1"))

    with pytest.raises(ReadOnlyFieldError):
        store.update_field(0, "total", 5)
    with pytest.raises(ReadOnlyFieldError):
        store.update_field(0, "id", "it-9")
    with pytest.raises(UnknownFieldError):
        store.update_field(0, "color", "red")
    with pytest.raises(InvalidFieldValueError):
        store.update_field(0, "quantity", "two")
    with pytest.raises(IndexError):
        store.update_field(5, "description", "x")


def test_renaming_reference_clears_catalog_id() -> None:
    row = line_item_from_record(_record("it-1"))

    renamed = apply_field_update(row, "spare_part_ref", "Rotor")
    unchanged = apply_field_update(row, "spare_part_ref", "Brake Pad")

    assert renamed.spare_part_id is None
    assert unchanged.spare_part_id == "sp-1"
    assert row.spare_part_ref == "Brake Pad"


def test_catalog_selection_autofills_price_and_cost() -> None:
    store = LineItemStore()
    store.add_row()
    store.update_field(0, "quantity", 2)

    store.select_spare_part(0, SparePartRead(id="sp-9", name="Oil Filter", price=Decimal("50000")))
    store.select_labor_type(0, LaborTypeRead(id="lt-9", name="Basic Service", cost=Decimal("30000")))
    row = store.assign_employee(0, EmployeeRead(id="emp-1", full_name="Ana Ruiz"))

    assert row.spare_part_id == "sp-9"
    assert row.unit_price == Decimal("50000.00")
    assert row.labor_cost == Decimal("30000.00")
    assert row.total == Decimal("130000.00")
    assert row.assigned_to_ref == "Ana Ruiz"
    assert store.assign_employee(0, None).assigned_to_id is None


def test_revert_row_restores_loaded_values() -> None:
    store = _store_with(_record("it-1"))
    store.update_field(0, "description", "Changed")

    reverted = store.revert_row(0)

    assert reverted == store.original["it-1"]
    assert store.row(0).description == "Item it-1"


def test_revert_row_is_idempotent() -> None:
    store = _store_with(_record("it-1"), _record("it-2"))
    store.update_field(0, "quantity", 4)
    store.update_field(0, "description", "Changed")

    first = store.revert_row(0)
    state_after_first = store.items
    second = store.revert_row(0)

    assert first == second == store.original["it-1"]
    assert store.items == state_after_first
    assert store.deleted_item_ids == ()


def test_mark_submitted_assigns_inserted_ids() -> None:
    store = _store_with(_record("it-1"), _record("it-2"))
    store.remove_row(1)
    store.add_row()
    store.update_field(1, "description", "Wipers")

    rows = store.mark_submitted(["it-3"])

    assert [row.id for row in rows] == ["it-1", "it-3"]
    assert set(store.original) == {"it-1", "it-3"}
    assert store.deleted_item_ids == ()
    assert store.changes().new_items == []
    with pytest.raises(ValueError):
        store.mark_submitted(["it-4"])


def test_revert_row_leaves_new_rows_alone() -> None:
    store = LineItemStore()
    store.add_row()
    store.update_field(0, "description", "Draft")

    assert store.revert_row(0).description == "Draft"


def test_remove_row_records_only_persisted_ids() -> None:
    store = _store_with(_record("it-1"))
    store.add_row()

    store.remove_row(1)
    store.remove_row(0)

    assert len(store) == 0
    assert store.deleted_item_ids == ("it-1",)
    assert "it-1" in store.original


def test_reset_all_clears_everything() -> None:
    store = _store_with(_record("it-1"))
    store.remove_row(0)

    store.reset_all()

    assert len(store) == 0
    assert dict(store.original) == {}
    assert store.deleted_item_ids == ()
    assert store.repair_order_id is None


def test_subscribers_receive_events_until_unsubscribed() -> None:
    store = LineItemStore()
    events: list[str] = []
    unsubscribe = store.subscribe(lambda event, _store: events.append(event))

    store.add_row()
    store.update_field(0, "description", "Draft")
    unsubscribe()
    store.remove_row(0)

    assert events == ["added", "updated"]


def test_pure_insertion_scenario() -> None:
    store = LineItemStore(lambda _order_id: [])
    store.load_existing_items("ro-1")
    store.add_row()
    for field_name, value in (
        ("description", "Oil change"),
        ("sparePartRef", "Oil Filter"),
        ("quantity", 2),
        ("unitPrice", 50000),
        ("laborTypeRef", "Basic Service"),
        ("laborCost", 30000),
    ):
        store.update_field(0, field_name, value)

    assert store.row(0).total == Decimal("130000.00")
    changes = store.changes()
    assert len(changes.new_items) == 1
    assert changes.updated_items == []
    assert changes.deleted_item_ids == []


def test_update_then_delete_scenario() -> None:
    store = _store_with(_record("it-1", total_amount="100000"))

    store.update_field(0, "quantity", 3)
    assert store.row(0).total == Decimal("120000.00")
    store.remove_row(0)

    changes = store.changes()
    assert changes.updated_items == []
    assert changes.new_items == []
    assert changes.deleted_item_ids == ["it-1"]


def test_mixed_batch_scenario() -> None:
    store = _store_with(_record("it-1"), _record("it-2"))

    edited = store.update_field(0, "description", "Edited")
    store.remove_row(store.index_of("it-2"))
    store.add_row()

    changes = store.changes()
    assert changes.updated_items == [edited]
    assert changes.deleted_item_ids == ["it-2"]
    assert len(changes.new_items) == 1


def test_order_total_sums_current_rows() -> None:
    store = _store_with(_record("it-1"), _record("it-2", quantity=2))

    assert store.order_total() == Decimal("120000.00")
    store.remove_row(0)
    assert store.order_total() == Decimal("80000.00")


def test_line_item_accepts_camel_case_payloads() -> None:
    row = LineItem.model_validate({"id": "it-1", "sparePartRef": "Filter", "unitPrice": "1.5"})

    assert row.spare_part_ref == "Filter"
    assert row.unit_price == Decimal("1.50")
