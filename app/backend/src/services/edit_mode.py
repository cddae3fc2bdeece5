"""Per-row edit mode tracking for the line-item table."""

from __future__ import annotations

from app.backend.src.core.errors import ReadOnlyFieldError
from app.backend.src.schemas.line_item import LineItem
from app.backend.src.services.line_item_store import (
    LineItemStore,
    READ_ONLY_FIELDS,
    resolve_field_name,
)
from app.backend.src.services.validation import ReferencePolicy, validate_row


class RowEditModeController:
    """Tracks which rows are being edited, keyed by each row's stable id.

    Rows start in display mode. Saving is gated on :func:`validate_row`;
    cancelling always succeeds and either discards an untouched new row or
    restores the row's loaded values.
    """

    def __init__(
        self, store: LineItemStore, *, policy: ReferencePolicy | None = None
    ) -> None:
        self._store = store
        self._policy = policy
        self._editing: set[str] = set()
        self._errors: dict[str, list[str]] = {}
        store.subscribe(self._on_store_change)

    def is_editing(self, row_index: int) -> bool:
        return self._key(row_index) in self._editing

    def editing_indices(self) -> list[int]:
        return [
            index
            for index, item in enumerate(self._store.items)
            if item.id in self._editing
        ]

    def errors_for(self, row_index: int) -> list[str]:
        return list(self._errors.get(self._key(row_index), []))

    @staticmethod
    def can_edit_column(column: str) -> bool:
        return resolve_field_name(column) not in READ_ONLY_FIELDS

    def begin_edit(self, row_index: int, column: str | None = None) -> None:
        """Switch a row into edit mode; the total column never opens an editor."""

        if column is not None and not self.can_edit_column(column):
            raise ReadOnlyFieldError(resolve_field_name(column))
        self._editing.add(self._key(row_index))

    def add_row(self) -> tuple[LineItem, int]:
        """Append a blank row and open it for editing straight away."""

        row, index = self._store.add_row()
        self.begin_edit(index)
        return row, index

    def save(self, row_index: int) -> list[str]:
        """Leave edit mode when the row validates; return the violations otherwise."""

        key = self._key(row_index)
        violations = validate_row(self._store.row(row_index), policy=self._policy)
        if violations:
            self._errors[key] = violations
            return violations
        self._errors.pop(key, None)
        self._editing.discard(key)
        return []

    def cancel(self, row_index: int) -> LineItem | None:
        """Leave edit mode unconditionally.

        Returns the restored row, or ``None`` when an untouched new row was
        dropped from the store.
        """

        key = self._key(row_index)
        self._errors.pop(key, None)
        self._editing.discard(key)
        if self._store.is_pristine_new_row(row_index):
            self._store.remove_row(row_index)
            return None
        return self._store.revert_row(row_index)

    def reset(self) -> None:
        self._editing.clear()
        self._errors.clear()

    def _key(self, row_index: int) -> str:
        return str(self._store.row(row_index).id)

    def _on_store_change(self, event: str, store: LineItemStore) -> None:
        if event in {"loaded", "reset"}:
            self.reset()
            return
        live_ids = {item.id for item in store.items}
        self._editing.intersection_update(live_ids)
        for key in [key for key in self._errors if key not in live_ids]:
            del self._errors[key]


__all__ = ["RowEditModeController"]
