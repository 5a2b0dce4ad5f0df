"""
Dashboard API — posture overview and per-container risk analytics.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.api.deps import get_db
from primesec.schemas.schemas import ContainerRiskAnalytics, DashboardAnalytics
from primesec.services.analytics_service import AnalyticsService

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/analytics", response_model=DashboardAnalytics)
async def get_dashboard_analytics(db: AsyncSession = Depends(get_db)):
    return await AnalyticsService(db).dashboard()


@router.get("/containers/{container_id}", response_model=ContainerRiskAnalytics)
async def get_container_risk_analytics(container_id: int, db: AsyncSession = Depends(get_db)):
    """Zeros and empty lists for a container with no issues (or no such container)."""
    return await AnalyticsService(db).container_risk(container_id)
