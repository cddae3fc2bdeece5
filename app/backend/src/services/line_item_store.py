"""Working-set store for the line items of one repair order editing session."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from decimal import Decimal
from types import MappingProxyType
from typing import Any

import structlog
from pydantic import ValidationError

from app.backend.src.core.errors import (
    InvalidFieldValueError,
    LineItemLoadError,
    ReadOnlyFieldError,
    UnknownFieldError,
)
from app.backend.src.schemas.catalog import EmployeeRead, LaborTypeRead, SparePartRead
from app.backend.src.schemas.line_item import LineItem
from app.backend.src.schemas.repair_order import RepairOrderItemRead
from app.backend.src.services.calculations import order_total, row_total, to_money
from app.backend.src.services.reconciliation import ReconciliationResult, reconcile

LOGGER = structlog.get_logger(__name__)

ItemRecord = RepairOrderItemRead | Mapping[str, Any]
ItemFetcher = Callable[[str], Iterable[ItemRecord]]
Listener = Callable[[str, Any], None]

READ_ONLY_FIELDS = frozenset({"id", "total"})
TOTAL_INPUT_FIELDS = frozenset({"quantity", "unit_price", "labor_cost"})
MONEY_FIELDS = frozenset({"unit_price", "labor_cost"})
REFERENCE_ID_FIELDS: dict[str, str] = {
    "spare_part_ref": "spare_part_id",
    "labor_type_ref": "labor_type_id",
    "assigned_to_ref": "assigned_to_id",
}


def resolve_field_name(field_name: str) -> str:
    """Map a snake_case or camelCase field name onto a :class:`LineItem` field."""

    if field_name in LineItem.model_fields:
        return field_name
    for name, info in LineItem.model_fields.items():
        if info.alias == field_name:
            return name
    raise UnknownFieldError(field_name)


def _coerce_quantity(value: object) -> int:
    if isinstance(value, bool):
        raise InvalidFieldValueError("quantity", value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise InvalidFieldValueError("quantity", value) from exc
    raise InvalidFieldValueError("quantity", value)


def _coerce_value(name: str, value: object) -> object:
    if name == "quantity":
        return _coerce_quantity(value)
    if name in MONEY_FIELDS:
        try:
            return to_money(value)
        except ValueError as exc:
            raise InvalidFieldValueError(name, value) from exc
    if name.endswith("_id"):
        return str(value) if value else None
    return "" if value is None else str(value)


def apply_field_update(row: LineItem, field_name: str, value: object) -> LineItem:
    """Return a copy of ``row`` with one field changed and ``total`` kept current.

    Renaming a catalog reference drops the catalog id it carried, since the id
    no longer describes the selected name.
    """

    name = resolve_field_name(field_name)
    if name in READ_ONLY_FIELDS:
        raise ReadOnlyFieldError(name)

    coerced = _coerce_value(name, value)
    update: dict[str, object] = {name: coerced}
    linked_id = REFERENCE_ID_FIELDS.get(name)
    if linked_id and coerced != getattr(row, name):
        update[linked_id] = None

    updated = row.model_copy(update=update)
    if name in TOTAL_INPUT_FIELDS:
        updated = updated.model_copy(update={"total": updated.expected_total})
    return updated


def line_item_from_record(record: ItemRecord) -> LineItem:
    """Map a persisted item record onto a working :class:`LineItem`."""

    if not isinstance(record, RepairOrderItemRead):
        record = RepairOrderItemRead.model_validate(record)

    quantity = record.quantity if record.quantity is not None else 1
    unit_price = to_money(record.unit_price)
    labor_cost = to_money(record.labor_cost)
    total = row_total(quantity, unit_price, labor_cost)
    if record.total_amount is not None and to_money(record.total_amount) != total:
        LOGGER.warning(
            "line_item_total_recomputed",
            item_id=record.id,
            stored_total=str(record.total_amount),
            computed_total=str(total),
        )

    return LineItem(
        id=record.id,
        description=record.description or "",
        spare_part_ref=record.spare_part_name or "",
        spare_part_id=record.spare_part_id,
        quantity=quantity,
        unit_price=unit_price,
        labor_type_ref=record.labor_type_name or "",
        labor_type_id=record.labor_type_id,
        labor_cost=labor_cost,
        total=total,
        assigned_to_ref=record.assigned_employee_name or "",
        assigned_to_id=record.assigned_to,
    )


class LineItemStore:
    """Owns the current rows, the as-loaded snapshot and the deletion ledger.

    Row positions are only meaningful until the next removal; callers that
    need to track a row across edits should hold on to its id.
    """

    def __init__(self, fetch_items: ItemFetcher | None = None) -> None:
        self._fetch_items = fetch_items
        self._current: list[LineItem] = []
        self._original: dict[str, LineItem] = {}
        self._deleted_ids: list[str] = []
        self._listeners: list[Listener] = []
        self.repair_order_id: str | None = None

    def __len__(self) -> int:
        return len(self._current)

    @property
    def items(self) -> tuple[LineItem, ...]:
        return tuple(self._current)

    @property
    def original(self) -> Mapping[str, LineItem]:
        return MappingProxyType(self._original)

    @property
    def deleted_item_ids(self) -> tuple[str, ...]:
        return tuple(self._deleted_ids)

    def row(self, row_index: int) -> LineItem:
        self._check_index(row_index)
        return self._current[row_index]

    def index_of(self, item_id: str) -> int | None:
        for index, item in enumerate(self._current):
            if item.id == item_id:
                return index
        return None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for change events; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def load_existing_items(self, repair_order_id: str) -> list[LineItem]:
        """Replace the session state with the persisted items of ``repair_order_id``."""

        if self._fetch_items is None:
            raise LineItemLoadError(repair_order_id, "No item source configured")
        try:
            records = list(self._fetch_items(repair_order_id))
        except LineItemLoadError:
            raise
        except Exception as exc:
            LOGGER.warning(
                "line_items_load_failed",
                repair_order_id=repair_order_id,
                error=str(exc),
            )
            raise LineItemLoadError(
                repair_order_id, "Failed to load existing repair items"
            ) from exc
        return self.load_items(records, repair_order_id=repair_order_id)

    def load_items(
        self, records: Iterable[ItemRecord], *, repair_order_id: str | None = None
    ) -> list[LineItem]:
        """Map ``records`` and install them as both the current and original rows."""

        order_id = repair_order_id or self.repair_order_id or ""
        try:
            items = [line_item_from_record(record) for record in records]
        except (ValidationError, ValueError) as exc:
            raise LineItemLoadError(order_id, f"Malformed repair item: {exc}") from exc

        original: dict[str, LineItem] = {}
        for item in items:
            if not item.is_persisted:
                raise LineItemLoadError(order_id, f"Loaded item has no persisted id: {item.id!r}")
            if item.id in original:
                raise LineItemLoadError(order_id, f"Duplicate repair item id: {item.id}")
            original[item.id] = item

        self.repair_order_id = repair_order_id or self.repair_order_id
        self._current = list(items)
        self._original = original
        self._deleted_ids = []
        LOGGER.info("line_items_loaded", repair_order_id=order_id, count=len(items))
        self._notify("loaded")
        return list(items)

    def add_row(self) -> tuple[LineItem, int]:
        """Append a blank, not-yet-persisted row and return it with its index."""

        row = LineItem.blank()
        self._current.append(row)
        self._notify("added")
        return row, len(self._current) - 1

    def update_field(self, row_index: int, field_name: str, value: object) -> LineItem:
        self._check_index(row_index)
        updated = apply_field_update(self._current[row_index], field_name, value)
        self._current[row_index] = updated
        self._notify("updated")
        return updated

    def select_spare_part(self, row_index: int, part: SparePartRead) -> LineItem:
        """Select a catalog part, carrying its id and auto-filling the unit price."""

        return self._replace_row(
            row_index,
            spare_part_ref=part.name,
            spare_part_id=part.id,
            unit_price=to_money(part.price),
        )

    def select_labor_type(self, row_index: int, labor: LaborTypeRead) -> LineItem:
        """Select a catalog labor type, carrying its id and auto-filling the cost."""

        return self._replace_row(
            row_index,
            labor_type_ref=labor.name,
            labor_type_id=labor.id,
            labor_cost=to_money(labor.cost),
        )

    def assign_employee(self, row_index: int, employee: EmployeeRead | None) -> LineItem:
        if employee is None:
            return self._replace_row(row_index, assigned_to_ref="", assigned_to_id=None)
        return self._replace_row(
            row_index,
            assigned_to_ref=employee.full_name,
            assigned_to_id=employee.id,
        )

    def revert_row(self, row_index: int) -> LineItem:
        """Restore the row's as-loaded values; rows created this session are left alone."""

        self._check_index(row_index)
        row = self._current[row_index]
        original = self._original.get(row.id) if row.id else None
        if original is None:
            return row
        self._current[row_index] = original
        self._notify("reverted")
        return original

    def remove_row(self, row_index: int) -> LineItem:
        """Remove the row, recording persisted ids in the deletion ledger."""

        self._check_index(row_index)
        row = self._current.pop(row_index)
        if row.id in self._original and row.id not in self._deleted_ids:
            self._deleted_ids.append(row.id)
        self._notify("removed")
        return row

    def mark_submitted(self, inserted_ids: Sequence[str]) -> list[LineItem]:
        """Adopt a committed submission without reloading.

        Unsaved rows take ``inserted_ids`` in order, the current rows become the
        new snapshot and the deletion ledger is cleared.
        """

        pending = [index for index, item in enumerate(self._current) if not item.is_persisted]
        if len(pending) != len(inserted_ids):
            raise ValueError(
                f"Expected {len(pending)} inserted ids, got {len(inserted_ids)}"
            )
        for index, item_id in zip(pending, inserted_ids):
            self._current[index] = self._current[index].model_copy(update={"id": item_id})

        self._original = {str(item.id): item for item in self._current}
        self._deleted_ids = []
        self._notify("loaded")
        return list(self._current)

    def reset_all(self) -> None:
        self._current = []
        self._original = {}
        self._deleted_ids = []
        self.repair_order_id = None
        self._notify("reset")

    def is_pristine_new_row(self, row_index: int) -> bool:
        row = self.row(row_index)
        return not row.is_persisted and row.is_blank()

    def order_total(self) -> Decimal:
        return order_total(self._current)

    def changes(self) -> ReconciliationResult:
        return reconcile(self._current, self._original, self._deleted_ids)

    def _replace_row(self, row_index: int, **update: object) -> LineItem:
        self._check_index(row_index)
        updated = self._current[row_index].model_copy(update=update)
        updated = updated.model_copy(update={"total": updated.expected_total})
        self._current[row_index] = updated
        self._notify("updated")
        return updated

    def _check_index(self, row_index: int) -> None:
        if not 0 <= row_index < len(self._current):
            raise IndexError(f"Row index {row_index} out of range")

    def _notify(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self)


__all__ = [
    "LineItemStore",
    "apply_field_update",
    "line_item_from_record",
    "resolve_field_name",
]
