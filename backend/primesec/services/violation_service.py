import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.models import Container, SecurityIssue, SecurityViolation, User
from primesec.models.enums import ACTIVE_STATUSES, IssueStatus
from primesec.schemas.schemas import (
    SecurityViolationCreate,
    SecurityViolationDetail,
    SecurityViolationFilter,
)
from primesec.services.query_helpers import severity_rank
from primesec.services.references import require_row, require_optional_row

logger = logging.getLogger(__name__)


def _violation_conditions(filters: SecurityViolationFilter) -> list:
    conditions = []
    if filters.violation_type is not None:
        conditions.append(SecurityViolation.violation_type == filters.violation_type.value)
    if filters.severity is not None:
        conditions.append(SecurityViolation.severity == filters.severity.value)
    if filters.status is not None:
        conditions.append(SecurityViolation.status == filters.status.value)
    if filters.assigned_to is not None:
        conditions.append(SecurityViolation.assigned_to == filters.assigned_to)
    if filters.container_id is not None:
        conditions.append(SecurityViolation.container_id == filters.container_id)
    if filters.created_after is not None:
        conditions.append(SecurityViolation.created_at >= filters.created_after)
    if filters.created_before is not None:
        conditions.append(SecurityViolation.created_at <= filters.created_before)
    if filters.incident_after is not None:
        conditions.append(SecurityViolation.incident_date >= filters.incident_after)
    if filters.incident_before is not None:
        conditions.append(SecurityViolation.incident_date <= filters.incident_before)
    return conditions


def _violation_ordering(order_by: str | None) -> list:
    if order_by == "created_at":
        return [SecurityViolation.created_at.desc()]
    if order_by == "incident_date":
        return [SecurityViolation.incident_date.desc(), SecurityViolation.created_at.desc()]
    if order_by == "severity":
        return [severity_rank(SecurityViolation.severity).asc(), SecurityViolation.created_at.desc()]
    if order_by == "status":
        return [SecurityViolation.status.desc(), SecurityViolation.created_at.desc()]
    # Default: most severe first, newest first within a severity
    return [severity_rank(SecurityViolation.severity).asc(), SecurityViolation.created_at.desc()]


class ViolationService:
    """Recorded security incidents (policy, compliance, access, data, system)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_violation(self, data: SecurityViolationCreate) -> SecurityViolation:
        await require_row(self.session, User, data.created_by)
        await require_optional_row(self.session, Container, data.container_id)
        await require_optional_row(self.session, SecurityIssue, data.related_issue_id)
        await require_optional_row(self.session, User, data.assigned_to)

        violation = SecurityViolation(
            title=data.title,
            description=data.description,
            violation_type=data.violation_type.value,
            severity=data.severity.value,
            status=IssueStatus.OPEN.value,
            incident_date=data.incident_date,
            detection_method=data.detection_method,
            affected_systems=data.affected_systems,
            impact_assessment=data.impact_assessment,
            remediation_steps=data.remediation_steps,
            container_id=data.container_id,
            related_issue_id=data.related_issue_id,
            assigned_to=data.assigned_to,
            created_by=data.created_by,
        )
        self.session.add(violation)
        await self.session.flush()
        logger.info(
            "Recorded %s violation %s (%s)",
            violation.violation_type, violation.id, violation.severity,
        )
        return violation

    async def list_violations(
        self, filters: SecurityViolationFilter | None = None
    ) -> list[SecurityViolation]:
        filters = filters or SecurityViolationFilter()
        result = await self.session.execute(
            select(SecurityViolation)
            .where(*_violation_conditions(filters))
            .order_by(*_violation_ordering(filters.order_by), SecurityViolation.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return list(result.scalars().all())

    async def list_active_violations(self) -> list[SecurityViolation]:
        """Violations still Open or In-progress, most severe first."""
        result = await self.session.execute(
            select(SecurityViolation)
            .where(SecurityViolation.status.in_(ACTIVE_STATUSES))
            .order_by(
                severity_rank(SecurityViolation.severity).asc(),
                SecurityViolation.created_at.desc(),
                SecurityViolation.id.desc(),
            )
        )
        return list(result.scalars().all())

    async def list_violations_with_details(
        self, filters: SecurityViolationFilter | None = None
    ) -> list[SecurityViolationDetail]:
        """Violations joined with their container name and assignee's full name."""
        filters = filters or SecurityViolationFilter()
        result = await self.session.execute(
            select(SecurityViolation, Container.name, User.full_name)
            .outerjoin(Container, Container.id == SecurityViolation.container_id)
            .outerjoin(User, User.id == SecurityViolation.assigned_to)
            .where(*_violation_conditions(filters))
            .order_by(*_violation_ordering(filters.order_by), SecurityViolation.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return [
            SecurityViolationDetail.model_validate(violation).model_copy(
                update={"container_name": container_name, "assignee_name": assignee_name}
            )
            for violation, container_name, assignee_name in result.all()
        ]
