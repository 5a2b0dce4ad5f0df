"""
Security Review Service

Reviews move through a small status workflow:

    Pending  -> InReview | Completed | Rejected
    InReview -> Completed | Rejected
    Completed, Rejected: terminal

Document analysis is separate from the workflow. It can run on any review,
stores its structured result and always leaves the review Completed.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.database import utcnow
from primesec.errors import ValidationFailure
from primesec.middleware.metrics import document_analyses_total
from primesec.models import Container, SecurityReview, User
from primesec.models.enums import ReviewStatus
from primesec.schemas.schemas import (
    SecurityReviewCreate,
    SecurityReviewFilter,
    SecurityReviewStatusUpdate,
)
from primesec.services.document_analysis import analyze_review_document
from primesec.services.references import require_row, require_optional_row

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    ReviewStatus.PENDING.value: {
        ReviewStatus.IN_REVIEW.value,
        ReviewStatus.COMPLETED.value,
        ReviewStatus.REJECTED.value,
    },
    ReviewStatus.IN_REVIEW.value: {
        ReviewStatus.COMPLETED.value,
        ReviewStatus.REJECTED.value,
    },
    ReviewStatus.COMPLETED.value: set(),
    ReviewStatus.REJECTED.value: set(),
}


class ReviewService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_review(self, data: SecurityReviewCreate) -> SecurityReview:
        await require_row(self.session, User, data.created_by)
        await require_optional_row(self.session, Container, data.container_id)

        review = SecurityReview(
            title=data.title,
            description=data.description,
            document_name=data.document_name,
            document_url=data.document_url,
            document_type=data.document_type,
            status=ReviewStatus.PENDING.value,
            ai_analysis_complete=False,
            ai_analysis_results=None,
            container_id=data.container_id,
            created_by=data.created_by,
        )
        self.session.add(review)
        await self.session.flush()
        logger.info("Created security review %s", review.id)
        return review

    async def list_reviews(self, filters: SecurityReviewFilter | None = None) -> list[SecurityReview]:
        filters = filters or SecurityReviewFilter()

        conditions = []
        if filters.container_id is not None:
            conditions.append(SecurityReview.container_id == filters.container_id)
        if filters.status is not None:
            conditions.append(SecurityReview.status == filters.status.value)
        if filters.reviewer_id is not None:
            conditions.append(SecurityReview.reviewer_id == filters.reviewer_id)
        if filters.ai_analysis_complete is not None:
            conditions.append(SecurityReview.ai_analysis_complete == filters.ai_analysis_complete)
        if filters.created_by is not None:
            conditions.append(SecurityReview.created_by == filters.created_by)

        result = await self.session.execute(
            select(SecurityReview)
            .where(*conditions)
            .order_by(SecurityReview.created_at.desc(), SecurityReview.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return list(result.scalars().all())

    async def list_reviews_by_container(self, container_id: int) -> list[SecurityReview]:
        result = await self.session.execute(
            select(SecurityReview)
            .where(SecurityReview.container_id == container_id)
            .order_by(SecurityReview.created_at.desc(), SecurityReview.id.desc())
        )
        return list(result.scalars().all())

    async def get_review(self, review_id: int) -> SecurityReview | None:
        return await self.session.get(SecurityReview, review_id)

    async def update_status(self, review_id: int, data: SecurityReviewStatusUpdate) -> SecurityReview:
        review = await require_row(self.session, SecurityReview, review_id)
        await require_optional_row(self.session, User, data.reviewer_id)

        target = data.status.value
        if target != review.status and target not in ALLOWED_TRANSITIONS[review.status]:
            raise ValidationFailure(
                f"Cannot move security review {review_id} from {review.status} to {target}"
            )

        review.status = target
        if data.reviewer_id is not None:
            review.reviewer_id = data.reviewer_id
        review.updated_at = utcnow()
        await self.session.flush()
        logger.info("Security review %s status -> %s", review_id, target)
        return review

    async def process_ai_analysis(self, review_id: int) -> SecurityReview:
        review = await require_row(self.session, SecurityReview, review_id)

        analysis = analyze_review_document(review)
        review.ai_analysis_results = analysis.model_dump(mode="json")
        review.ai_analysis_complete = True
        review.status = ReviewStatus.COMPLETED.value
        review.updated_at = utcnow()
        await self.session.flush()

        document_analyses_total.labels(classification=analysis.document_classification).inc()
        logger.info(
            "Analysed security review %s document (%s, score=%s)",
            review_id, analysis.document_classification, analysis.overall_security_score,
        )
        return review
