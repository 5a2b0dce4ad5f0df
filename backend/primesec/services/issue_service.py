"""
Security Issue Service (Workroom)

Creates, lists and partially updates security issues. Every write that
touches the impact dimensions recomputes the issue's risk score and then
refreshes the owning container's average score as a secondary step whose
failure is logged, never raised.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.database import utcnow
from primesec.errors import ValidationFailure
from primesec.middleware.metrics import security_issues_created_total
from primesec.models import Container, SecurityIssue, User
from primesec.schemas.schemas import (
    SecurityIssueCreate,
    SecurityIssueFilter,
    SecurityIssueUpdate,
)
from primesec.services.query_helpers import severity_rank, hierarchy_rank
from primesec.services.references import require_row, require_optional_row
from primesec.services.scoring_engine import (
    IMPACT_WEIGHTS,
    ScoringEngine,
    calculate_issue_risk_score,
    to_decimal,
)

logger = logging.getLogger(__name__)

IMPACT_FIELDS = tuple(IMPACT_WEIGHTS)

# Columns that may not be cleared with an explicit null in an update payload.
_NON_NULLABLE = {
    "title",
    "description",
    "severity",
    "status",
    "classification",
    *IMPACT_FIELDS,
}


class IssueService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.scoring = ScoringEngine(session)

    # ── Create ───────────────────────────────────────────────────────────

    async def create_issue(self, data: SecurityIssueCreate) -> SecurityIssue:
        await require_row(self.session, Container, data.container_id)
        await require_row(self.session, User, data.created_by)
        await require_optional_row(self.session, User, data.assigned_to)
        parent = await require_optional_row(self.session, SecurityIssue, data.parent_issue_id)
        if parent is not None and parent.container_id != data.container_id:
            raise ValidationFailure(
                f"Parent issue {parent.id} belongs to container {parent.container_id}, "
                f"not {data.container_id}"
            )

        risk_score = calculate_issue_risk_score(
            data.confidentiality_impact,
            data.integrity_impact,
            data.availability_impact,
            data.compliance_impact,
            data.third_party_risk,
        )

        issue = SecurityIssue(
            title=data.title,
            description=data.description,
            severity=data.severity.value,
            status="Open",
            classification=data.classification.value,
            hierarchy=data.hierarchy.value,
            risk_score=risk_score,
            confidentiality_impact=to_decimal(data.confidentiality_impact),
            integrity_impact=to_decimal(data.integrity_impact),
            availability_impact=to_decimal(data.availability_impact),
            compliance_impact=to_decimal(data.compliance_impact),
            third_party_risk=to_decimal(data.third_party_risk),
            mitre_attack_id=data.mitre_attack_id,
            mitre_attack_tactic=data.mitre_attack_tactic,
            mitre_attack_technique=data.mitre_attack_technique,
            linddun_category=data.linddun_category,
            attack_complexity=data.attack_complexity,
            threat_modeling_notes=data.threat_modeling_notes,
            compensating_controls=data.compensating_controls,
            container_id=data.container_id,
            parent_issue_id=data.parent_issue_id,
            assigned_to=data.assigned_to,
            created_by=data.created_by,
            is_automated_finding=data.is_automated_finding,
        )
        self.session.add(issue)
        await self.session.flush()

        security_issues_created_total.labels(severity=issue.severity).inc()
        logger.info(
            "Created issue %s in container %s (risk_score=%s)",
            issue.id, issue.container_id, issue.risk_score,
        )

        await self.scoring.refresh_after_issue_write(issue.container_id)
        return issue

    # ── Read ─────────────────────────────────────────────────────────────

    async def list_issues(self, filters: SecurityIssueFilter | None = None) -> list[SecurityIssue]:
        """Filtered issues, highest risk first, then severity rank, then newest."""
        filters = filters or SecurityIssueFilter()

        conditions = []
        if filters.container_id is not None:
            conditions.append(SecurityIssue.container_id == filters.container_id)
        if filters.severity is not None:
            conditions.append(SecurityIssue.severity == filters.severity.value)
        if filters.status is not None:
            conditions.append(SecurityIssue.status == filters.status.value)
        if filters.classification is not None:
            conditions.append(SecurityIssue.classification == filters.classification.value)
        if filters.assigned_to is not None:
            conditions.append(SecurityIssue.assigned_to == filters.assigned_to)
        if filters.is_automated_finding is not None:
            conditions.append(SecurityIssue.is_automated_finding == filters.is_automated_finding)
        if filters.created_after is not None:
            conditions.append(SecurityIssue.created_at >= filters.created_after)
        if filters.created_before is not None:
            conditions.append(SecurityIssue.created_at <= filters.created_before)
        if filters.risk_score_min is not None:
            conditions.append(SecurityIssue.risk_score >= to_decimal(filters.risk_score_min))
        if filters.risk_score_max is not None:
            conditions.append(SecurityIssue.risk_score <= to_decimal(filters.risk_score_max))

        result = await self.session.execute(
            select(SecurityIssue)
            .where(*conditions)
            .order_by(
                SecurityIssue.risk_score.desc(),
                severity_rank(SecurityIssue.severity).asc(),
                SecurityIssue.created_at.desc(),
                SecurityIssue.id.desc(),
            )
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return list(result.scalars().all())

    async def list_issues_by_container(self, container_id: int) -> list[SecurityIssue]:
        """All issues of one container: Task before Story before Epic, then by risk."""
        result = await self.session.execute(
            select(SecurityIssue)
            .where(SecurityIssue.container_id == container_id)
            .order_by(
                hierarchy_rank(SecurityIssue.hierarchy).desc(),
                SecurityIssue.risk_score.desc(),
                SecurityIssue.created_at.desc(),
            )
        )
        return list(result.scalars().all())

    # ── Update ───────────────────────────────────────────────────────────

    async def update_issue(self, issue_id: int, data: SecurityIssueUpdate) -> SecurityIssue:
        issue = await require_row(self.session, SecurityIssue, issue_id)

        changes = data.model_dump(exclude_unset=True, mode="json")
        for field in _NON_NULLABLE:
            if field in changes and changes[field] is None:
                raise ValidationFailure(f"{field} cannot be null")
        if changes.get("assigned_to") is not None:
            await require_row(self.session, User, changes["assigned_to"])

        rescore = any(field in changes for field in IMPACT_FIELDS)

        for field, value in changes.items():
            if field in IMPACT_FIELDS:
                value = to_decimal(value)
            setattr(issue, field, value)

        if rescore:
            issue.risk_score = calculate_issue_risk_score(
                *(getattr(issue, field) for field in IMPACT_FIELDS)
            )

        issue.updated_at = utcnow()
        await self.session.flush()
        logger.info(
            "Updated issue %s fields=%s (rescored=%s)",
            issue.id, sorted(changes), rescore,
        )

        if rescore:
            await self.scoring.refresh_after_issue_write(issue.container_id)
        return issue
