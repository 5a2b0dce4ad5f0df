"""
Dashboard Analytics

Read-only rollups over issues, containers, violations and controls. The
queries run one after another on the request's AsyncSession; a single
session cannot serve concurrent statements.
"""

import logging
from datetime import timedelta

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.config import settings
from primesec.database import utcnow
from primesec.models import Container, SecurityControl, SecurityIssue, SecurityViolation
from primesec.models.enums import (
    ACTIVE_STATUSES,
    RESOLVED_STATUSES,
    ControlStatus,
    SeverityLevel,
)
from primesec.schemas.schemas import (
    ContainerRiskAnalytics,
    ControlCoverage,
    DashboardAnalytics,
    RecentViolation,
    RiskTrendPoint,
    TopIssue,
    TopRiskContainer,
)
from primesec.services.scoring_engine import ScoringEngine, quantize_score, to_decimal

logger = logging.getLogger(__name__)


def _count_where(condition):
    return func.sum(case((condition, 1), else_=0))


class AnalyticsService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.scoring = ScoringEngine(session)

    # ── Dashboard ────────────────────────────────────────────────────────

    async def dashboard(self) -> DashboardAnalytics:
        issue_stats = await self._issue_stats()
        top_containers = await self._top_risk_containers()
        recent = await self._recent_violations()
        coverage = await self._control_coverage()

        return DashboardAnalytics(
            **issue_stats,
            top_risk_containers=top_containers,
            recent_violations=recent,
            control_coverage=coverage,
        )

    async def _issue_stats(self) -> dict:
        row = (await self.session.execute(
            select(
                func.count(SecurityIssue.id).label("total"),
                _count_where(SecurityIssue.severity == SeverityLevel.CRITICAL.value).label("critical"),
                _count_where(SecurityIssue.severity == SeverityLevel.HIGH.value).label("high"),
                _count_where(SecurityIssue.severity == SeverityLevel.MEDIUM.value).label("medium"),
                _count_where(SecurityIssue.severity == SeverityLevel.LOW.value).label("low"),
                _count_where(SecurityIssue.status.in_(ACTIVE_STATUSES)).label("open"),
                _count_where(SecurityIssue.status.in_(RESOLVED_STATUSES)).label("resolved"),
                func.avg(SecurityIssue.risk_score).label("avg_score"),
            )
        )).one()

        return {
            "total_issues": int(row.total or 0),
            "critical_issues": int(row.critical or 0),
            "high_issues": int(row.high or 0),
            "medium_issues": int(row.medium or 0),
            "low_issues": int(row.low or 0),
            "open_issues": int(row.open or 0),
            "resolved_issues": int(row.resolved or 0),
            "average_risk_score": float(quantize_score(to_decimal(row.avg_score))),
        }

    async def _top_risk_containers(self) -> list[TopRiskContainer]:
        avg_score = func.avg(SecurityIssue.risk_score).label("avg_score")
        result = await self.session.execute(
            select(
                Container.id,
                Container.name,
                avg_score,
                func.count(SecurityIssue.id).label("issue_count"),
            )
            .join(SecurityIssue, SecurityIssue.container_id == Container.id)
            .group_by(Container.id, Container.name)
            .order_by(avg_score.desc(), Container.id.asc())
            .limit(settings.top_risk_container_limit)
        )
        return [
            TopRiskContainer(
                container_id=row.id,
                container_name=row.name,
                risk_score=float(quantize_score(to_decimal(row.avg_score))),
                issue_count=int(row.issue_count),
            )
            for row in result.all()
        ]

    async def _recent_violations(self) -> list[RecentViolation]:
        cutoff = utcnow() - timedelta(days=settings.recent_violation_window_days)
        result = await self.session.execute(
            select(SecurityViolation)
            .where(SecurityViolation.incident_date >= cutoff)
            .order_by(SecurityViolation.incident_date.desc(), SecurityViolation.id.desc())
            .limit(settings.recent_violation_limit)
        )
        return [
            RecentViolation(
                id=v.id,
                title=v.title,
                severity=v.severity,
                incident_date=v.incident_date,
                created_at=v.created_at,
            )
            for v in result.scalars().all()
        ]

    async def _control_coverage(self) -> ControlCoverage:
        result = await self.session.execute(
            select(SecurityControl.implementation_status, func.count(SecurityControl.id))
            .where(SecurityControl.is_active == True)  # noqa: E712
            .group_by(SecurityControl.implementation_status)
        )
        counts = {status: int(count) for status, count in result.all()}
        return ControlCoverage(
            existing=counts.get(ControlStatus.EXISTING.value, 0),
            planned=counts.get(ControlStatus.PLANNED.value, 0),
            not_specified=counts.get(ControlStatus.NOT_SPECIFIED.value, 0),
        )

    # ── Per container ────────────────────────────────────────────────────

    async def container_risk(self, container_id: int) -> ContainerRiskAnalytics:
        """
        Risk rollup for one container.

        container_risk_score is the plain mean over every issue; the
        severity-weighted mean over Open issues is reported alongside without
        being persisted. An unknown container yields zeros and empty lists.
        """
        mean_score = await self.scoring.mean_issue_score(container_id)
        weighted_open = await self.scoring.weighted_open_issue_score(container_id)

        breakdown_result = await self.session.execute(
            select(SecurityIssue.severity, func.count(SecurityIssue.id))
            .where(SecurityIssue.container_id == container_id)
            .group_by(SecurityIssue.severity)
        )
        issue_breakdown = {severity: int(count) for severity, count in breakdown_result.all()}

        day = func.date(SecurityIssue.created_at).label("day")
        trend_result = await self.session.execute(
            select(day, func.avg(SecurityIssue.risk_score).label("score"))
            .where(SecurityIssue.container_id == container_id)
            .group_by(day)
            .order_by(day.asc())
        )
        risk_trends = [
            RiskTrendPoint(date=str(row.day), score=float(quantize_score(to_decimal(row.score))))
            for row in trend_result.all()
        ]

        top_result = await self.session.execute(
            select(SecurityIssue.id, SecurityIssue.title, SecurityIssue.risk_score)
            .where(SecurityIssue.container_id == container_id)
            .order_by(SecurityIssue.risk_score.desc(), SecurityIssue.id.desc())
            .limit(settings.top_issue_limit)
        )
        top_issues = [
            TopIssue(id=row.id, title=row.title, risk_score=float(to_decimal(row.risk_score)))
            for row in top_result.all()
        ]

        return ContainerRiskAnalytics(
            container_risk_score=float(mean_score),
            weighted_open_risk_score=float(weighted_open),
            issue_breakdown=issue_breakdown,
            risk_trends=risk_trends,
            top_issues=top_issues,
        )
