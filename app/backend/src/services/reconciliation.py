"""Derive insert/update/delete operations from an edited line-item working set."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

import structlog

from app.backend.src.core.errors import OrphanedLineItemError
from app.backend.src.schemas.line_item import LineItem, is_unsaved_id
from app.backend.src.schemas.repair_order import (
    RepairOrderChanges,
    RepairOrderItemUpdate,
    RepairOrderItemWrite,
    RepairOrderSubmission,
)

LOGGER = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReconciliationResult:
    """Partitioned operation set for the persistence layer."""

    new_items: list[LineItem] = field(default_factory=list)
    updated_items: list[LineItem] = field(default_factory=list)
    deleted_item_ids: list[str] = field(default_factory=list)


def reconcile(
    current: Sequence[LineItem],
    original: Mapping[str, LineItem] | Iterable[LineItem],
    deleted_item_ids: Sequence[str],
) -> ReconciliationResult:
    """Partition ``current`` against the loaded snapshot.

    Rows carrying the not-yet-persisted marker are inserts; rows whose id is in
    ``original`` are updates, sent whether or not any field changed. A row with
    a persisted id that ``original`` does not know about cannot be produced by
    the store and raises :class:`OrphanedLineItemError`.
    """

    if isinstance(original, Mapping):
        original_ids = set(original)
    else:
        original_ids = {item.id for item in original if item.id}

    new_items: list[LineItem] = []
    updated_items: list[LineItem] = []
    orphaned: list[str] = []
    for item in current:
        if is_unsaved_id(item.id):
            new_items.append(item)
        elif item.id in original_ids:
            updated_items.append(item)
        else:
            orphaned.append(str(item.id))

    if orphaned:
        LOGGER.error("line_items_orphaned", item_ids=orphaned)
        raise OrphanedLineItemError(orphaned)

    return ReconciliationResult(
        new_items=new_items,
        updated_items=updated_items,
        deleted_item_ids=list(deleted_item_ids),
    )


def _normalize_item(item: LineItem) -> dict[str, object]:
    if item.spare_part_ref and not item.spare_part_id:
        LOGGER.warning(
            "spare_part_unresolved",
            item_id=item.id,
            spare_part_ref=item.spare_part_ref,
        )
    if item.labor_type_ref and not item.labor_type_id:
        LOGGER.warning(
            "labor_type_unresolved",
            item_id=item.id,
            labor_type_ref=item.labor_type_ref,
        )
    return {
        "description": item.description.strip(),
        "spare_part_id": item.spare_part_id or None,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "labor_type_id": item.labor_type_id or None,
        "labor_cost": item.labor_cost,
        "total_amount": item.total,
        "assigned_to": item.assigned_to_id or None,
    }


def build_changes(result: ReconciliationResult) -> RepairOrderChanges:
    """Normalize a reconciliation result into the persistence payload shape.

    Catalog references resolve through the ids carried on each row; a row
    that only has a display name submits ``None`` for that reference.
    """

    return RepairOrderChanges(
        new_items=[RepairOrderItemWrite(**_normalize_item(item)) for item in result.new_items],
        updated_items=[
            RepairOrderItemUpdate(id=str(item.id), **_normalize_item(item))
            for item in result.updated_items
        ],
        deleted_item_ids=list(result.deleted_item_ids),
    )


def build_submission(result: ReconciliationResult, total_amount: Decimal) -> RepairOrderSubmission:
    """Return the order total and normalized operation set for submission."""

    return RepairOrderSubmission(total_amount=total_amount, changes=build_changes(result))


__all__ = [
    "ReconciliationResult",
    "build_changes",
    "build_submission",
    "reconcile",
]
