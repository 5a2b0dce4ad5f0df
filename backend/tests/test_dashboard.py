"""Tests for the dashboard and per-container risk analytics."""

from datetime import datetime, timedelta

import pytest

from primesec.database import utcnow
from primesec.models import SecurityControl, SecurityViolation
from primesec.services.analytics_service import AnalyticsService
from tests.conftest import make_container, make_issue, make_user


async def _violation(session, created_by: int, title: str, incident_date: datetime, severity: str = "High"):
    violation = SecurityViolation(
        title=title,
        description=title,
        violation_type="SecurityBreach",
        severity=severity,
        incident_date=incident_date,
        created_by=created_by,
    )
    session.add(violation)
    await session.flush()
    return violation


async def _control(session, container_id: int, created_by: int, status: str, is_active: bool = True):
    control = SecurityControl(
        name=f"{status} control",
        control_type="Detective",
        implementation_status=status,
        container_id=container_id,
        created_by=created_by,
        is_active=is_active,
    )
    session.add(control)
    await session.flush()
    return control


@pytest.mark.asyncio
class TestDashboardAnalytics:
    async def test_empty(self, db_session):
        result = await AnalyticsService(db_session).dashboard()

        assert result.total_issues == 0
        assert result.average_risk_score == 0
        assert result.top_risk_containers == []
        assert result.recent_violations == []
        assert result.control_coverage.existing == 0
        assert result.control_coverage.planned == 0
        assert result.control_coverage.not_specified == 0

    async def test_mixed_data(self, db_session):
        user = await make_user(db_session)
        high = await make_container(db_session, user.id, name="High Risk Container")
        low = await make_container(db_session, user.id, name="Low Risk Container")
        await make_issue(db_session, high.id, user.id, severity="Critical", status="Open", risk_score=95)
        await make_issue(db_session, high.id, user.id, severity="High", status="In-progress", risk_score=80)
        await make_issue(db_session, low.id, user.id, severity="Medium", status="Resolved", risk_score=50)
        await make_issue(db_session, low.id, user.id, severity="Low", status="Closed", risk_score=20)

        now = utcnow()
        await _violation(db_session, user.id, "Recent Security Breach", now - timedelta(days=1), "Critical")
        await _violation(db_session, user.id, "Older Policy Violation", now - timedelta(days=10))
        await _violation(db_session, user.id, "Ancient Incident", now - timedelta(days=45))

        await _control(db_session, high.id, user.id, "Existing")
        await _control(db_session, high.id, user.id, "Planned")
        await _control(db_session, low.id, user.id, "NotSpecified")
        await _control(db_session, low.id, user.id, "Existing", is_active=False)

        result = await AnalyticsService(db_session).dashboard()

        assert result.total_issues == 4
        assert (result.critical_issues, result.high_issues, result.medium_issues, result.low_issues) == (1, 1, 1, 1)
        assert result.open_issues == 2
        assert result.resolved_issues == 2
        assert result.average_risk_score == 61.25

        assert [c.container_name for c in result.top_risk_containers] == [
            "High Risk Container", "Low Risk Container",
        ]
        assert result.top_risk_containers[0].risk_score == 87.5
        assert result.top_risk_containers[0].issue_count == 2
        assert result.top_risk_containers[1].risk_score == 35.0

        assert [v.title for v in result.recent_violations] == [
            "Recent Security Breach", "Older Policy Violation",
        ]
        assert result.recent_violations[0].severity == "Critical"

        assert result.control_coverage.existing == 1
        assert result.control_coverage.planned == 1
        assert result.control_coverage.not_specified == 1

    async def test_top_containers_capped_at_five(self, db_session):
        user = await make_user(db_session)
        for i in range(7):
            container = await make_container(db_session, user.id, name=f"C{i}")
            await make_issue(db_session, container.id, user.id, risk_score=10 * (i + 1))

        result = await AnalyticsService(db_session).dashboard()

        assert [c.container_name for c in result.top_risk_containers] == ["C6", "C5", "C4", "C3", "C2"]

    async def test_recent_violations_capped_at_ten(self, db_session):
        user = await make_user(db_session)
        now = utcnow()
        for i in range(12):
            await _violation(db_session, user.id, f"V{i}", now - timedelta(hours=i))

        result = await AnalyticsService(db_session).dashboard()

        assert len(result.recent_violations) == 10
        assert result.recent_violations[0].title == "V0"


@pytest.mark.asyncio
class TestContainerRiskAnalytics:
    async def test_unknown_container_is_empty(self, db_session):
        result = await AnalyticsService(db_session).container_risk(999999)

        assert result.container_risk_score == 0
        assert result.weighted_open_risk_score == 0
        assert result.issue_breakdown == {}
        assert result.risk_trends == []
        assert result.top_issues == []

    async def test_container_rollup(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        other = await make_container(db_session, user.id, name="Other")
        day_one = datetime(2024, 3, 1, 9, 30)
        day_two = datetime(2024, 3, 2, 14, 0)
        await make_issue(db_session, container.id, user.id, title="Critical Issue", severity="Critical",
                         risk_score=90, created_at=day_one)
        await make_issue(db_session, container.id, user.id, title="High Issue", severity="High",
                         risk_score=75, created_at=day_one)
        await make_issue(db_session, container.id, user.id, title="Medium Issue", severity="Medium",
                         risk_score=40, status="Closed", created_at=day_two)
        await make_issue(db_session, other.id, user.id, risk_score=5)

        result = await AnalyticsService(db_session).container_risk(container.id)

        assert result.container_risk_score == 68.33
        # Open issues only: (90*1.0 + 75*0.8) / 1.8
        assert result.weighted_open_risk_score == 83.33
        assert result.issue_breakdown == {"Critical": 1, "High": 1, "Medium": 1}
        assert [(p.date, p.score) for p in result.risk_trends] == [
            ("2024-03-01", 82.5),
            ("2024-03-02", 40.0),
        ]
        assert [(t.title, t.risk_score) for t in result.top_issues] == [
            ("Critical Issue", 90.0),
            ("High Issue", 75.0),
            ("Medium Issue", 40.0),
        ]

    async def test_top_issues_capped_at_ten(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        for i in range(1, 16):
            await make_issue(db_session, container.id, user.id, title=f"Issue {i}", risk_score=i * 5)

        result = await AnalyticsService(db_session).container_risk(container.id)

        assert len(result.top_issues) == 10
        assert result.top_issues[0].title == "Issue 15"
        assert result.top_issues[0].risk_score == 75.0
        assert result.top_issues[9].title == "Issue 6"
        assert result.top_issues[9].risk_score == 30.0
