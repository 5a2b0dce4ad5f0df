"""
Security Issues API — intake, filtered queue and partial updates.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.api.deps import get_db
from primesec.schemas.schemas import (
    SecurityIssueCreate,
    SecurityIssueFilter,
    SecurityIssueOut,
    SecurityIssueUpdate,
)
from primesec.services.issue_service import IssueService

router = APIRouter(prefix="/api/issues", tags=["issues"])


@router.post("", response_model=SecurityIssueOut, status_code=201)
async def create_issue(body: SecurityIssueCreate, db: AsyncSession = Depends(get_db)):
    return await IssueService(db).create_issue(body)


@router.get("", response_model=list[SecurityIssueOut])
async def list_issues(
    filters: Annotated[SecurityIssueFilter, Query()],
    db: AsyncSession = Depends(get_db),
):
    """Highest risk first; ties broken by severity, then newest."""
    return await IssueService(db).list_issues(filters)


@router.patch("/{issue_id}", response_model=SecurityIssueOut)
async def update_issue(
    issue_id: int,
    body: SecurityIssueUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await IssueService(db).update_issue(issue_id, body)
