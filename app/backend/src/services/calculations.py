"""Calculation helpers for line-item and order totals."""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Protocol

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class _PricedRow(Protocol):
    quantity: int
    unit_price: Decimal
    labor_cost: Decimal


def to_money(value: object) -> Decimal:
    """Coerce ``value`` into a cent-quantized :class:`~decimal.Decimal`.

    ``None`` and blank strings become zero. Floats are converted through their
    string form so ``0.1`` stays ``0.10`` rather than its binary expansion.
    Raises :class:`ValueError` for anything that is not a finite number.
    """

    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return ZERO
        try:
            amount = Decimal(cleaned)
        except InvalidOperation as exc:
            raise ValueError(f"Not a monetary amount: {value!r}") from exc
    else:
        raise ValueError(f"Not a monetary amount: {value!r}")

    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def row_total(quantity: int, unit_price: object, labor_cost: object) -> Decimal:
    """Return ``quantity * unit_price + labor_cost`` in exact decimal arithmetic."""

    return (Decimal(int(quantity)) * to_money(unit_price) + to_money(labor_cost)).quantize(
        CENT, rounding=ROUND_HALF_UP
    )


def order_total(rows: Iterable[_PricedRow]) -> Decimal:
    """Sum the row totals of ``rows``, recomputed from each row's components."""

    return sum(
        (row_total(row.quantity, row.unit_price, row.labor_cost) for row in rows),
        ZERO,
    )


__all__ = ["CENT", "ZERO", "order_total", "row_total", "to_money"]
