"""Editing session tying the line-item store to its collaborators."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal

import structlog

from app.backend.src.core.errors import (
    InvalidLineItemsError,
    LineItemLoadError,
    SubmissionError,
    UsageLimitExceededError,
)
from app.backend.src.schemas.catalog import Catalog, UsageCheck
from app.backend.src.schemas.line_item import LineItem
from app.backend.src.schemas.repair_order import RepairOrderSubmission, SubmissionResult
from app.backend.src.services import metrics
from app.backend.src.services.edit_mode import RowEditModeController
from app.backend.src.services.line_item_store import (
    ItemFetcher,
    LineItemStore,
    resolve_field_name,
)
from app.backend.src.services.reconciliation import build_submission
from app.backend.src.services.validation import ReferencePolicy, validate_field, validate_row

LOGGER = structlog.get_logger(__name__)

CatalogFetcher = Callable[[], Catalog]
Submitter = Callable[[str, RepairOrderSubmission], SubmissionResult]
UsageChecker = Callable[[str | None, str | None], UsageCheck]


class RepairOrderEditor:
    """One operator's editing session over the line items of a repair order.

    Load and submit failures leave the session state untouched so the
    operator can retry.
    """

    def __init__(
        self,
        repair_order_id: str,
        *,
        fetch_items: ItemFetcher,
        fetch_catalog: CatalogFetcher,
        submit: Submitter,
        check_usage: UsageChecker | None = None,
        policy: ReferencePolicy | None = None,
    ) -> None:
        self.repair_order_id = repair_order_id
        self.store = LineItemStore(fetch_items)
        self.modes = RowEditModeController(self.store, policy=policy)
        self.catalog = Catalog()
        self._fetch_catalog = fetch_catalog
        self._submit = submit
        self._check_usage = check_usage
        self._policy = policy

    def open(self) -> list[LineItem]:
        """Fetch the catalog and the order's existing items."""

        try:
            catalog = self._fetch_catalog()
        except Exception as exc:
            metrics.line_item_load_failures_total.inc()
            raise LineItemLoadError(
                self.repair_order_id, "Failed to load spare parts and labor types"
            ) from exc
        try:
            items = self.store.load_existing_items(self.repair_order_id)
        except LineItemLoadError:
            metrics.line_item_load_failures_total.inc()
            raise
        self.catalog = catalog
        return items

    def close(self) -> None:
        self.store.reset_all()

    @property
    def items(self) -> tuple[LineItem, ...]:
        return self.store.items

    def order_total(self) -> Decimal:
        return self.store.order_total()

    def add_row(self) -> tuple[LineItem, int]:
        return self.modes.add_row()

    def edit_row(self, row_index: int, column: str | None = None) -> None:
        self.modes.begin_edit(row_index, column)

    def update_field(self, row_index: int, field_name: str, value: object) -> str:
        """Apply a field edit and return its inline validation message.

        Typed spare part and labor type names that match a catalog entry are
        applied as a catalog selection so the row carries the entry's id.
        """

        name = resolve_field_name(field_name)
        text = value if isinstance(value, str) else ""
        part = self.catalog.find_spare_part_by_name(text) if name == "spare_part_ref" else None
        labor = self.catalog.find_labor_type_by_name(text) if name == "labor_type_ref" else None
        if part is not None:
            self.select_spare_part(row_index, part.id)
        elif labor is not None:
            self.select_labor_type(row_index, labor.id)
        else:
            self.store.update_field(row_index, field_name, value)
        return validate_field(field_name, value, policy=self._policy)

    def select_spare_part(self, row_index: int, spare_part_id: str) -> LineItem:
        part = self.catalog.spare_part(spare_part_id)
        if part is None:
            raise LookupError(f"Unknown spare part {spare_part_id}")
        self._ensure_within_limits(spare_part_id, None)
        return self.store.select_spare_part(row_index, part)

    def select_labor_type(self, row_index: int, labor_type_id: str) -> LineItem:
        labor = self.catalog.labor_type(labor_type_id)
        if labor is None:
            raise LookupError(f"Unknown labor type {labor_type_id}")
        self._ensure_within_limits(None, labor_type_id)
        return self.store.select_labor_type(row_index, labor)

    def assign_employee(self, row_index: int, employee_id: str | None) -> LineItem:
        employee = self.catalog.employee(employee_id)
        if employee_id and employee is None:
            raise LookupError(f"Unknown employee {employee_id}")
        return self.store.assign_employee(row_index, employee)

    def save_row(self, row_index: int) -> list[str]:
        return self.modes.save(row_index)

    def cancel_row(self, row_index: int) -> LineItem | None:
        return self.modes.cancel(row_index)

    def remove_row(self, row_index: int) -> LineItem:
        return self.store.remove_row(row_index)

    def pending_violations(self) -> dict[int, list[str]]:
        violations: dict[int, list[str]] = {}
        for index, item in enumerate(self.store.items):
            messages = validate_row(item, policy=self._policy)
            if messages:
                violations[index] = messages
        return violations

    def build_submission(self) -> RepairOrderSubmission:
        return build_submission(self.store.changes(), self.store.order_total())

    def submit(self) -> SubmissionResult:
        """Reconcile, hand the change set to the persistence layer and reload."""

        violations = self.pending_violations()
        if violations:
            raise InvalidLineItemsError(violations)

        submission = self.build_submission()
        try:
            result = self._submit(self.repair_order_id, submission)
        except SubmissionError as exc:
            LOGGER.warning(
                "repair_order_editor_submit_failed",
                repair_order_id=self.repair_order_id,
                stage=exc.stage,
                rolled_back=exc.rolled_back,
            )
            raise

        LOGGER.info(
            "repair_order_editor_submitted",
            repair_order_id=self.repair_order_id,
            inserted=len(result.inserted_ids),
            updated=len(result.updated_ids),
            deleted=len(result.deleted_ids),
        )
        try:
            self.store.load_existing_items(self.repair_order_id)
        except LineItemLoadError:
            # committed already; keep the rows but give them their persisted ids
            metrics.line_item_load_failures_total.inc()
            LOGGER.warning(
                "repair_order_editor_reload_failed",
                repair_order_id=self.repair_order_id,
            )
            self.store.mark_submitted(result.inserted_ids)
        return result

    def _ensure_within_limits(
        self, spare_part_id: str | None, labor_type_id: str | None
    ) -> None:
        if self._check_usage is None:
            return
        usage = self._check_usage(spare_part_id, labor_type_id)
        if not usage.allowed:
            message = usage.messages[0] if usage.messages else "Usage limit exceeded"
            raise UsageLimitExceededError(message)


__all__ = ["RepairOrderEditor"]
