"""
Security Violations API — incident records and the active-incident queue.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.api.deps import get_db
from primesec.schemas.schemas import (
    SecurityViolationCreate,
    SecurityViolationDetail,
    SecurityViolationFilter,
    SecurityViolationOut,
)
from primesec.services.violation_service import ViolationService

router = APIRouter(prefix="/api/violations", tags=["violations"])


@router.post("", response_model=SecurityViolationOut, status_code=201)
async def create_violation(body: SecurityViolationCreate, db: AsyncSession = Depends(get_db)):
    return await ViolationService(db).create_violation(body)


@router.get("", response_model=list[SecurityViolationOut])
async def list_violations(
    filters: Annotated[SecurityViolationFilter, Query()],
    db: AsyncSession = Depends(get_db),
):
    return await ViolationService(db).list_violations(filters)


@router.get("/active", response_model=list[SecurityViolationOut])
async def list_active_violations(db: AsyncSession = Depends(get_db)):
    """Open and In-progress violations, most severe first."""
    return await ViolationService(db).list_active_violations()


@router.get("/details", response_model=list[SecurityViolationDetail])
async def list_violations_with_details(
    filters: Annotated[SecurityViolationFilter, Query()],
    db: AsyncSession = Depends(get_db),
):
    return await ViolationService(db).list_violations_with_details(filters)
