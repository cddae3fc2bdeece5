"""Seed the development database with a demo catalog and repair order."""

from app.backend.src.db import create_tables, session_scope
from app.backend.src.services.seed import seed_development_data


def main() -> None:
    """Create tables (if needed) and ensure the demo data exists."""

    create_tables()

    with session_scope() as session:
        result = seed_development_data(session)
        session.flush()

        print("✅ Development data ready!")
        status = "created" if result.repair_order_created else "unchanged"
        order = result.repair_order
        print(
            f"Repair order ({status}): {order.license_plate} "
            f"[id={order.id}, total={order.total_amount}]"
        )
        print(f"Spare parts: {', '.join(part.name for part in result.spare_parts)}")
        print(f"Labor types: {', '.join(labor.name for labor in result.labor_types)}")
        if result.employee is not None:
            print(f"Employee: {result.employee.full_name} [id={result.employee.id}]")


if __name__ == "__main__":
    main()
