"""Repair order line item endpoints."""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.backend.src.core.errors import SubmissionError
from app.backend.src.db import get_session_dependency
from app.backend.src.schemas.repair_order import (
    RepairOrderItemRead,
    RepairOrderSubmission,
    SubmissionFailure,
    SubmissionResult,
)
from app.backend.src.services import repair_orders as repair_order_service

LOGGER = structlog.get_logger(__name__)

router = APIRouter(prefix="/repair-orders", tags=["repair orders"])


@router.get("/{repair_order_id}/items", response_model=list[RepairOrderItemRead])
def list_repair_order_items(
    repair_order_id: str,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> list[RepairOrderItemRead]:
    """Return the persisted line items of a repair order."""

    return repair_order_service.fetch_existing_items(session, repair_order_id)


@router.put(
    "/{repair_order_id}/items",
    response_model=SubmissionResult,
    responses={status.HTTP_409_CONFLICT: {"model": SubmissionFailure}},
)
def submit_repair_order_items(
    repair_order_id: str,
    payload: RepairOrderSubmission,
    session: Annotated[Session, Depends(get_session_dependency)],
) -> SubmissionResult:
    """Apply a reconciled change set and the new order total."""

    try:
        return repair_order_service.apply_changes(session, repair_order_id, payload)
    except SubmissionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=SubmissionFailure(
                stage=exc.stage,
                message=exc.message,
                rolled_back=exc.rolled_back,
            ).model_dump(),
        ) from exc


__all__ = ["router"]
