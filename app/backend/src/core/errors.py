"""Exception hierarchy for the line-item engine."""

from __future__ import annotations


class LineItemError(Exception):
    """Base class for line-item editing failures."""


class LineItemLoadError(LineItemError):
    """Raised when existing repair order items cannot be loaded."""

    def __init__(self, repair_order_id: str, message: str) -> None:
        super().__init__(message)
        self.repair_order_id = repair_order_id
        self.message = message


class UnknownFieldError(LineItemError, KeyError):
    """Raised when a field name does not exist on a line item."""

    def __init__(self, field_name: str) -> None:
        super().__init__(field_name)
        self.field_name = field_name

    def __str__(self) -> str:
        return f"Unknown line item field: {self.field_name}"


class ReadOnlyFieldError(LineItemError):
    """Raised when a derived or identity field is edited directly."""

    def __init__(self, field_name: str) -> None:
        super().__init__(f"Field '{field_name}' cannot be edited")
        self.field_name = field_name


class InvalidFieldValueError(LineItemError, ValueError):
    """Raised when a value cannot be coerced to the field's type."""

    def __init__(self, field_name: str, value: object) -> None:
        super().__init__(f"Invalid value for '{field_name}': {value!r}")
        self.field_name = field_name
        self.value = value


class OrphanedLineItemError(LineItemError):
    """Raised when a persisted-looking row has no counterpart in the loaded snapshot."""

    def __init__(self, item_ids: list[str]) -> None:
        super().__init__(
            "Line items missing from the original snapshot: " + ", ".join(item_ids)
        )
        self.item_ids = item_ids


class InvalidLineItemsError(LineItemError):
    """Raised when rows with validation violations are submitted."""

    def __init__(self, violations: dict[int, list[str]]) -> None:
        super().__init__(f"{len(violations)} line item(s) failed validation")
        self.violations = violations


class UsageLimitExceededError(LineItemError):
    """Raised when a catalog selection would exceed the monthly usage limit."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class SubmissionError(LineItemError):
    """Raised when applying a reconciled change set fails at a given stage."""

    def __init__(self, stage: str, message: str, *, rolled_back: bool = True) -> None:
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.message = message
        self.rolled_back = rolled_back


__all__ = [
    "LineItemError",
    "LineItemLoadError",
    "UnknownFieldError",
    "ReadOnlyFieldError",
    "InvalidFieldValueError",
    "OrphanedLineItemError",
    "InvalidLineItemsError",
    "UsageLimitExceededError",
    "SubmissionError",
]
