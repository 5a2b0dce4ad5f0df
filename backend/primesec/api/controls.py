"""
Security Controls API — per-container control inventory.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.api.deps import get_db
from primesec.schemas.schemas import (
    SecurityControlCreate,
    SecurityControlFilter,
    SecurityControlOut,
)
from primesec.services.control_service import ControlService

router = APIRouter(prefix="/api/controls", tags=["controls"])


@router.post("", response_model=SecurityControlOut, status_code=201)
async def create_control(body: SecurityControlCreate, db: AsyncSession = Depends(get_db)):
    return await ControlService(db).create_control(body)


@router.get("", response_model=list[SecurityControlOut])
async def list_controls(
    filters: Annotated[SecurityControlFilter, Query()],
    db: AsyncSession = Depends(get_db),
):
    return await ControlService(db).list_controls(filters)


@router.delete("/{control_id}", response_model=SecurityControlOut)
async def deactivate_control(control_id: int, db: AsyncSession = Depends(get_db)):
    return await ControlService(db).deactivate_control(control_id)
