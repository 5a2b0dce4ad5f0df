"""
Architecture Components API.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.api.deps import get_db
from primesec.schemas.schemas import (
    ArchitectureComponentCreate,
    ArchitectureComponentFilter,
    ArchitectureComponentOut,
)
from primesec.services.architecture_service import ArchitectureService

router = APIRouter(prefix="/api/components", tags=["components"])


@router.post("", response_model=ArchitectureComponentOut, status_code=201)
async def create_component(body: ArchitectureComponentCreate, db: AsyncSession = Depends(get_db)):
    return await ArchitectureService(db).create_component(body)


@router.get("", response_model=list[ArchitectureComponentOut])
async def list_components(
    filters: Annotated[ArchitectureComponentFilter, Query()],
    db: AsyncSession = Depends(get_db),
):
    return await ArchitectureService(db).list_components(filters)


@router.delete("/{component_id}", response_model=ArchitectureComponentOut)
async def deactivate_component(component_id: int, db: AsyncSession = Depends(get_db)):
    return await ArchitectureService(db).deactivate_component(component_id)
