"""ORM models exposed for easy imports."""

from .employee import Employee
from .labor_type import LaborType
from .repair_order import RepairOrder
from .repair_order_item import RepairOrderItem
from .spare_part import SparePart

__all__ = [
    "Employee",
    "LaborType",
    "RepairOrder",
    "RepairOrderItem",
    "SparePart",
]
