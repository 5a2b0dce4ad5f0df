"""
Containers API — projects, applications, systems and services, plus the
container-scoped listings of issues, reviews, controls and components.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.api.deps import get_db
from primesec.schemas.schemas import (
    ArchitectureComponentOut,
    ContainerCreate,
    ContainerOut,
    SecurityControlOut,
    SecurityIssueOut,
    SecurityReviewOut,
)
from primesec.services.architecture_service import ArchitectureService
from primesec.services.container_service import ContainerService
from primesec.services.control_service import ControlService
from primesec.services.issue_service import IssueService
from primesec.services.review_service import ReviewService

router = APIRouter(prefix="/api/containers", tags=["containers"])


@router.post("", response_model=ContainerOut, status_code=201)
async def create_container(body: ContainerCreate, db: AsyncSession = Depends(get_db)):
    return await ContainerService(db).create_container(body)


@router.get("", response_model=list[ContainerOut])
async def list_containers(db: AsyncSession = Depends(get_db)):
    """Active containers; risk_score is the live mean of each container's issues."""
    rows = await ContainerService(db).list_active_containers()
    return [
        ContainerOut.model_validate(container).model_copy(update={"risk_score": float(avg)})
        for container, avg in rows
    ]


@router.post("/{container_id}/risk-score", response_model=ContainerOut)
async def update_container_risk_score(container_id: int, db: AsyncSession = Depends(get_db)):
    """Persist the severity-weighted score over the container's Open issues."""
    return await ContainerService(db).update_risk_score(container_id)


@router.delete("/{container_id}", response_model=ContainerOut)
async def deactivate_container(container_id: int, db: AsyncSession = Depends(get_db)):
    return await ContainerService(db).deactivate_container(container_id)


# ── Container-scoped listings ────────────────────────────────────────────────

@router.get("/{container_id}/issues", response_model=list[SecurityIssueOut])
async def list_container_issues(container_id: int, db: AsyncSession = Depends(get_db)):
    return await IssueService(db).list_issues_by_container(container_id)


@router.get("/{container_id}/reviews", response_model=list[SecurityReviewOut])
async def list_container_reviews(container_id: int, db: AsyncSession = Depends(get_db)):
    return await ReviewService(db).list_reviews_by_container(container_id)


@router.get("/{container_id}/controls", response_model=list[SecurityControlOut])
async def list_container_controls(container_id: int, db: AsyncSession = Depends(get_db)):
    return await ControlService(db).list_controls_by_container(container_id)


@router.get("/{container_id}/components", response_model=list[ArchitectureComponentOut])
async def list_container_components(container_id: int, db: AsyncSession = Depends(get_db)):
    return await ArchitectureService(db).list_components_by_container(container_id)
