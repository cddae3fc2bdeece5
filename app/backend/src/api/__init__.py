"""Public API routers exposed by the FastAPI application."""

from . import catalog, health, repair_orders

__all__ = [
    "catalog",
    "health",
    "repair_orders",
]
