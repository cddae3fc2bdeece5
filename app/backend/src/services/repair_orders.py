"""Service layer for loading and persisting repair order line items."""

from __future__ import annotations

import structlog
from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.backend.src.core.errors import SubmissionError
from app.backend.src.models import Employee, LaborType, RepairOrder, RepairOrderItem, SparePart
from app.backend.src.schemas.repair_order import (
    RepairOrderItemRead,
    RepairOrderItemWrite,
    RepairOrderSubmission,
    SubmissionResult,
)
from app.backend.src.services import metrics

LOGGER = structlog.get_logger(__name__)


def _get_order_or_404(session: Session, repair_order_id: str) -> RepairOrder:
    order = session.get(RepairOrder, repair_order_id)
    if order is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Repair order not found",
        )
    return order


def _serialize_item(item: RepairOrderItem) -> RepairOrderItemRead:
    return RepairOrderItemRead(
        id=item.id,
        repair_order_id=item.repair_order_id,
        description=item.description,
        quantity=item.quantity,
        unit_price=item.unit_price,
        labor_cost=item.labor_cost,
        total_amount=item.total_amount,
        spare_part_id=item.spare_part_id,
        spare_part_name=item.spare_part.name if item.spare_part else None,
        labor_type_id=item.labor_type_id,
        labor_type_name=item.labor_type.name if item.labor_type else None,
        assigned_to=item.assigned_to,
        assigned_employee_name=(
            item.assigned_employee.full_name if item.assigned_employee else None
        ),
    )


def fetch_existing_items(session: Session, repair_order_id: str) -> list[RepairOrderItemRead]:
    """Return the persisted items of an order with catalog names resolved."""

    _get_order_or_404(session, repair_order_id)
    items = session.scalars(
        select(RepairOrderItem)
        .options(
            selectinload(RepairOrderItem.spare_part),
            selectinload(RepairOrderItem.labor_type),
            selectinload(RepairOrderItem.assigned_employee),
        )
        .where(RepairOrderItem.repair_order_id == repair_order_id)
        .order_by(RepairOrderItem.created_at.asc(), RepairOrderItem.id.asc())
    ).all()
    return [_serialize_item(item) for item in items]


def _owned_item(
    session: Session, order: RepairOrder, item_id: str, stage: str
) -> RepairOrderItem:
    item = session.get(RepairOrderItem, item_id)
    if item is None or item.repair_order_id != order.id:
        raise SubmissionError(stage, f"Item {item_id} does not belong to this repair order")
    return item


def _check_references(session: Session, payload: RepairOrderItemWrite, stage: str) -> None:
    if payload.spare_part_id and session.get(SparePart, payload.spare_part_id) is None:
        raise SubmissionError(stage, f"Unknown spare part {payload.spare_part_id}")
    if payload.labor_type_id and session.get(LaborType, payload.labor_type_id) is None:
        raise SubmissionError(stage, f"Unknown labor type {payload.labor_type_id}")
    if payload.assigned_to and session.get(Employee, payload.assigned_to) is None:
        raise SubmissionError(stage, f"Unknown employee {payload.assigned_to}")


def _write_fields(item: RepairOrderItem, payload: RepairOrderItemWrite) -> None:
    item.description = payload.description
    item.spare_part_id = payload.spare_part_id
    item.labor_type_id = payload.labor_type_id
    item.assigned_to = payload.assigned_to
    item.quantity = payload.quantity
    item.unit_price = payload.unit_price
    item.labor_cost = payload.labor_cost
    item.total_amount = payload.total_amount


def apply_changes(
    session: Session, repair_order_id: str, submission: RepairOrderSubmission
) -> SubmissionResult:
    """Apply the order total, deletions, updates and insertions in one transaction.

    Any failing stage rolls back every earlier stage and raises
    :class:`SubmissionError` naming the stage that failed.
    """

    order = _get_order_or_404(session, repair_order_id)
    changes = submission.changes
    result = SubmissionResult(
        repair_order_id=order.id, total_amount=submission.total_amount
    )
    stage = "total"
    try:
        with metrics.submission_duration_seconds.time():
            order.total_amount = submission.total_amount
            session.flush()

            stage = "deletions"
            for item_id in changes.deleted_item_ids:
                session.delete(_owned_item(session, order, item_id, stage))
                result.deleted_ids.append(item_id)
            session.flush()

            stage = "updates"
            for payload in changes.updated_items:
                item = _owned_item(session, order, payload.id, stage)
                _check_references(session, payload, stage)
                _write_fields(item, payload)
                result.updated_ids.append(item.id)
            session.flush()

            stage = "insertions"
            for payload in changes.new_items:
                _check_references(session, payload, stage)
                item = RepairOrderItem(repair_order_id=order.id)
                _write_fields(item, payload)
                session.add(item)
                session.flush()
                result.inserted_ids.append(item.id)

            session.commit()
    except SubmissionError as exc:
        session.rollback()
        metrics.repair_order_submissions_total.labels(outcome="failed", stage=exc.stage).inc()
        LOGGER.warning(
            "repair_order_items_submission_failed",
            repair_order_id=repair_order_id,
            stage=exc.stage,
            error=exc.message,
        )
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        metrics.repair_order_submissions_total.labels(outcome="failed", stage=stage).inc()
        LOGGER.error(
            "repair_order_items_submission_failed",
            repair_order_id=repair_order_id,
            stage=stage,
            error=str(exc),
        )
        raise SubmissionError(stage, "Database error while applying changes") from exc

    metrics.repair_order_submissions_total.labels(outcome="succeeded", stage="").inc()
    metrics.repair_order_item_operations_total.labels(operation="insert").inc(
        len(result.inserted_ids)
    )
    metrics.repair_order_item_operations_total.labels(operation="update").inc(
        len(result.updated_ids)
    )
    metrics.repair_order_item_operations_total.labels(operation="delete").inc(
        len(result.deleted_ids)
    )
    LOGGER.info(
        "repair_order_items_submitted",
        repair_order_id=repair_order_id,
        total_amount=str(submission.total_amount),
        inserted=len(result.inserted_ids),
        updated=len(result.updated_ids),
        deleted=len(result.deleted_ids),
    )
    return result


__all__ = ["apply_changes", "fetch_existing_items"]
