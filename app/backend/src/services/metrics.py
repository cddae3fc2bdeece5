"""Prometheus metric definitions for repair order item processing."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

repair_order_submissions_total = Counter(
    "repair_order_submissions_total",
    "Repair order item submissions by outcome and failing stage.",
    labelnames=["outcome", "stage"],
)

repair_order_item_operations_total = Counter(
    "repair_order_item_operations_total",
    "Line item operations applied by kind.",
    labelnames=["operation"],
)

line_item_load_failures_total = Counter(
    "line_item_load_failures_total",
    "Failed attempts to load existing repair order items.",
)

submission_duration_seconds = Histogram(
    "repair_order_submission_duration_seconds",
    "Time spent applying a reconciled change set.",
)

__all__ = [
    "line_item_load_failures_total",
    "repair_order_item_operations_total",
    "repair_order_submissions_total",
    "submission_duration_seconds",
]
