"""Integration-flavored smoke tests for the FastAPI app."""

from __future__ import annotations

import os
import sys
from decimal import Decimal
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[4]))

import pytest
from fastapi.testclient import TestClient

# Configure environment before application imports
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_garage.db")

from app.backend.src.db import get_engine, session_scope
from app.backend.src.main import app
from app.backend.src.models import RepairOrder, RepairOrderItem
from app.backend.src.models.base import Base
from app.backend.src.schemas.catalog import Catalog
from app.backend.src.services.line_item_store import LineItemStore
from app.backend.src.services.reconciliation import build_submission
from app.backend.src.services.seed import seed_development_data


@pytest.fixture(autouse=True)
def setup_database() -> None:  # type: ignore[no-untyped-def]
    engine = get_engine()
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture()
def seeded() -> dict[str, str]:
    with session_scope() as session:
        result = seed_development_data(session)
        return {
            "order": result.repair_order.id,
            "part": result.spare_parts[2].id,
            "labor": result.labor_types[0].id,
        }


def test_liveness_endpoint(client: TestClient) -> None:
    response = client.get("/api/health/live")
    assert response.status_code == 200
    assert response.json()["status"] == "live"


def test_readiness_endpoint(client: TestClient) -> None:
    response = client.get("/api/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "database": "sqlite"}


def test_seed_is_idempotent(seeded: dict[str, str]) -> None:
    with session_scope() as session:
        again = seed_development_data(session)
        assert again.repair_order_created is False
        assert again.repair_order.id == seeded["order"]
        assert again.repair_order.total_amount == Decimal("395000.00")


def test_catalog_endpoint_lists_reference_data(client: TestClient, seeded: dict[str, str]) -> None:
    response = client.get("/api/catalog")

    assert response.status_code == 200, response.text
    payload = response.json()
    assert len(payload["spare_parts"]) == 3
    assert len(payload["labor_types"]) == 2
    assert payload["employees"][0]["full_name"] == "Demo Technician"


def test_usage_endpoint_reports_limits(client: TestClient, seeded: dict[str, str]) -> None:
    response = client.get("/api/catalog/usage", params={"spare_part_id": seeded["part"]})

    assert response.status_code == 200, response.text
    assert response.json()["can_add_part"] is True


def test_items_endpoint_for_unknown_order(client: TestClient) -> None:
    response = client.get("/api/repair-orders/missing/items")
    assert response.status_code == 404


def test_edit_session_round_trip_through_api(client: TestClient, seeded: dict[str, str]) -> None:
    order_id = seeded["order"]
    catalog = Catalog.model_validate(client.get("/api/catalog").json())

    def _fetch(repair_order_id: str) -> list[dict[str, object]]:
        response = client.get(f"/api/repair-orders/{repair_order_id}/items")
        response.raise_for_status()
        return response.json()

    store = LineItemStore(_fetch)
    store.load_existing_items(order_id)
    assert len(store) == 2

    store.update_field(0, "quantity", 3)
    store.remove_row(1)
    _row, index = store.add_row()
    store.update_field(index, "description", "Spark plugs")
    store.select_spare_part(index, catalog.spare_part(seeded["part"]))
    store.select_labor_type(index, catalog.labor_type(seeded["labor"]))
    store.update_field(index, "quantity", 4)

    submission = build_submission(store.changes(), store.order_total())
    response = client.put(
        f"/api/repair-orders/{order_id}/items",
        json=submission.model_dump(mode="json", by_alias=True),
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert len(body["inserted_ids"]) == 1
    assert len(body["updated_ids"]) == 1
    assert len(body["deleted_ids"]) == 1

    store.load_existing_items(order_id)
    assert len(store) == 2
    assert store.deleted_item_ids == ()
    with session_scope() as session:
        order = session.get(RepairOrder, order_id)
        assert order is not None
        assert order.total_amount == store.order_total()


def test_failed_submission_returns_conflict(client: TestClient, seeded: dict[str, str]) -> None:
    payload = {
        "totalAmount": "0",
        "changes": {"newItems": [], "updatedItems": [], "deletedItemIds": ["foreign-item"]},
    }

    response = client.put(f"/api/repair-orders/{seeded['order']}/items", json=payload)

    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["stage"] == "deletions"
    assert detail["rolled_back"] is True
    with session_scope() as session:
        count = (
            session.query(RepairOrderItem)
            .filter(RepairOrderItem.repair_order_id == seeded["order"])
            .count()
        )
    assert count == 2


def test_inconsistent_submission_is_rejected(client: TestClient, seeded: dict[str, str]) -> None:
    payload = {
        "totalAmount": "10",
        "changes": {
            "newItems": [
                {
                    "description": "Bad total",
                    "quantity": 1,
                    "unit_price": "5",
                    "labor_cost": "0",
                    "total_amount": "10",
                }
            ]
        },
    }

    response = client.put(f"/api/repair-orders/{seeded['order']}/items", json=payload)

    assert response.status_code == 422
