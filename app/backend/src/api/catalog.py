"""Catalog reference endpoints used by the line-item editor."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.backend.src.db import get_session_dependency
from app.backend.src.schemas.catalog import Catalog, UsageCheck
from app.backend.src.services import catalog as catalog_service

router = APIRouter(prefix="/catalog", tags=["catalog"])


@router.get("", response_model=Catalog)
def get_catalog(
    session: Annotated[Session, Depends(get_session_dependency)],
) -> Catalog:
    """Return spare parts, labor types and employees for selection fields."""

    return catalog_service.fetch_catalog(session)


@router.get("/usage", response_model=UsageCheck)
def check_usage(
    session: Annotated[Session, Depends(get_session_dependency)],
    spare_part_id: Annotated[str | None, Query()] = None,
    labor_type_id: Annotated[str | None, Query()] = None,
) -> UsageCheck:
    """Report whether a part or labor selection stays within the monthly limits."""

    return catalog_service.check_monthly_usage(
        session,
        spare_part_id=spare_part_id,
        labor_type_id=labor_type_id,
    )


__all__ = ["router"]
