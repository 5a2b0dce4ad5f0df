"""
Security Reviews API — document reviews, status workflow and AI analysis.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.api.deps import get_db
from primesec.schemas.schemas import (
    SecurityReviewCreate,
    SecurityReviewFilter,
    SecurityReviewOut,
    SecurityReviewStatusUpdate,
)
from primesec.services.review_service import ReviewService

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.post("", response_model=SecurityReviewOut, status_code=201)
async def create_review(body: SecurityReviewCreate, db: AsyncSession = Depends(get_db)):
    return await ReviewService(db).create_review(body)


@router.get("", response_model=list[SecurityReviewOut])
async def list_reviews(
    filters: Annotated[SecurityReviewFilter, Query()],
    db: AsyncSession = Depends(get_db),
):
    return await ReviewService(db).list_reviews(filters)


@router.get("/{review_id}", response_model=SecurityReviewOut)
async def get_review(review_id: int, db: AsyncSession = Depends(get_db)):
    review = await ReviewService(db).get_review(review_id)
    if review is None:
        raise HTTPException(status_code=404, detail=f"SecurityReview with id {review_id} not found")
    return review


@router.put("/{review_id}/status", response_model=SecurityReviewOut)
async def update_review_status(
    review_id: int,
    body: SecurityReviewStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Move the review along Pending -> InReview -> Completed/Rejected."""
    return await ReviewService(db).update_status(review_id, body)


@router.post("/{review_id}/ai-analysis", response_model=SecurityReviewOut)
async def process_ai_analysis(review_id: int, db: AsyncSession = Depends(get_db)):
    return await ReviewService(db).process_ai_analysis(review_id)
