"""Tests for security issue intake, listing and partial updates."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select, func

from primesec.database import utcnow
from primesec.errors import NotFoundError, ValidationFailure
from primesec.models import Container, SecurityIssue
from primesec.schemas.schemas import (
    SecurityIssueCreate,
    SecurityIssueFilter,
    SecurityIssueUpdate,
)
from primesec.services.issue_service import IssueService
from primesec.services.scoring_engine import ScoringEngine
from tests.conftest import make_container, make_issue, make_user


def _issue_payload(container_id: int, created_by: int, **overrides) -> SecurityIssueCreate:
    values = {
        "title": "Hard-coded credentials",
        "description": "Service account password committed to the repository",
        "severity": "High",
        "classification": "Weakness",
        "hierarchy": "Task",
        "confidentiality_impact": 80,
        "integrity_impact": 70,
        "availability_impact": 60,
        "compliance_impact": 10,
        "third_party_risk": 5,
        "container_id": container_id,
        "created_by": created_by,
    }
    values.update(overrides)
    return SecurityIssueCreate(**values)


async def _count_issues(session) -> int:
    return (await session.execute(select(func.count(SecurityIssue.id)))).scalar()


@pytest.mark.asyncio
class TestCreateIssue:
    async def test_computes_risk_score(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)

        issue = await IssueService(db_session).create_issue(_issue_payload(container.id, user.id))

        assert issue.id is not None
        assert issue.risk_score == Decimal("54.50")
        assert issue.status == "Open"
        assert issue.is_automated_finding is False

    async def test_refreshes_container_average(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        await make_issue(db_session, container.id, user.id, risk_score=90)

        await IssueService(db_session).create_issue(
            _issue_payload(
                container.id, user.id,
                confidentiality_impact=10, integrity_impact=10, availability_impact=10,
                compliance_impact=10, third_party_risk=10,
            )
        )

        refreshed = await db_session.get(Container, container.id)
        assert refreshed.risk_score == Decimal("50.00")

    async def test_keeps_threat_modeling_fields(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)

        issue = await IssueService(db_session).create_issue(
            _issue_payload(
                container.id, user.id,
                mitre_attack_id="T1552",
                mitre_attack_tactic="Credential Access",
                linddun_category="Identifiability",
                is_automated_finding=True,
            )
        )

        assert issue.mitre_attack_id == "T1552"
        assert issue.mitre_attack_tactic == "Credential Access"
        assert issue.linddun_category == "Identifiability"
        assert issue.is_automated_finding is True

    async def test_unknown_container(self, db_session):
        user = await make_user(db_session)

        with pytest.raises(NotFoundError) as exc_info:
            await IssueService(db_session).create_issue(_issue_payload(999999, user.id))

        assert exc_info.value.entity == "Container"
        assert "999999" in str(exc_info.value)
        assert await _count_issues(db_session) == 0

    async def test_unknown_assignee(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)

        with pytest.raises(NotFoundError, match="User with id 4242 not found"):
            await IssueService(db_session).create_issue(
                _issue_payload(container.id, user.id, assigned_to=4242)
            )
        assert await _count_issues(db_session) == 0

    async def test_unknown_parent(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)

        with pytest.raises(NotFoundError, match="SecurityIssue with id 77 not found"):
            await IssueService(db_session).create_issue(
                _issue_payload(container.id, user.id, parent_issue_id=77)
            )

    async def test_parent_in_other_container_rejected(self, db_session):
        user = await make_user(db_session)
        first = await make_container(db_session, user.id, name="First")
        second = await make_container(db_session, user.id, name="Second")
        parent = await make_issue(db_session, first.id, user.id, hierarchy="Epic")

        with pytest.raises(ValidationFailure):
            await IssueService(db_session).create_issue(
                _issue_payload(second.id, user.id, parent_issue_id=parent.id)
            )

    async def test_parent_in_same_container(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        parent = await make_issue(db_session, container.id, user.id, hierarchy="Epic")

        child = await IssueService(db_session).create_issue(
            _issue_payload(container.id, user.id, parent_issue_id=parent.id)
        )

        assert child.parent_issue_id == parent.id

    async def test_recompute_failure_does_not_fail_create(self, db_session, monkeypatch):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)

        async def boom(self, container_id):
            raise RuntimeError("aggregation down")

        monkeypatch.setattr(ScoringEngine, "apply_average_score", boom)
        issue = await IssueService(db_session).create_issue(_issue_payload(container.id, user.id))

        assert issue.id is not None
        assert await _count_issues(db_session) == 1


@pytest.mark.asyncio
class TestUpdateIssue:
    async def test_partial_impact_update_recombines_all_dimensions(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        issue = await make_issue(
            db_session, container.id, user.id,
            confidentiality_impact=50, integrity_impact=30, availability_impact=20,
            compliance_impact=10, third_party_risk=5,
        )
        assert issue.risk_score == Decimal("27.00")

        updated = await IssueService(db_session).update_issue(
            issue.id,
            SecurityIssueUpdate(confidentiality_impact=90, compliance_impact=40),
        )

        assert updated.risk_score == Decimal("41.50")
        assert updated.confidentiality_impact == Decimal("90")
        assert updated.compliance_impact == Decimal("40")
        assert updated.integrity_impact == Decimal("30")
        assert updated.availability_impact == Decimal("20")
        assert updated.third_party_risk == Decimal("5")

    async def test_impact_update_refreshes_container(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        issue = await make_issue(db_session, container.id, user.id, risk_score=10)
        await make_issue(db_session, container.id, user.id, risk_score=90)

        await IssueService(db_session).update_issue(
            issue.id,
            SecurityIssueUpdate(
                confidentiality_impact=30, integrity_impact=30, availability_impact=30,
                compliance_impact=30, third_party_risk=30,
            ),
        )

        refreshed = await db_session.get(Container, container.id)
        assert refreshed.risk_score == Decimal("60.00")

    async def test_non_impact_update_keeps_score(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        issue = await make_issue(db_session, container.id, user.id, risk_score=12.34)

        updated = await IssueService(db_session).update_issue(
            issue.id, SecurityIssueUpdate(status="In-progress", title="Renamed")
        )

        assert updated.status == "In-progress"
        assert updated.title == "Renamed"
        assert updated.risk_score == Decimal("12.34")

    async def test_updated_at_advances(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        issue = await make_issue(db_session, container.id, user.id)
        before = issue.updated_at

        updated = await IssueService(db_session).update_issue(
            issue.id, SecurityIssueUpdate(severity="Critical")
        )

        assert updated.updated_at > before

    async def test_explicit_null_clears_nullable_field(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        issue = await make_issue(db_session, container.id, user.id, mitre_attack_id="T1190")

        updated = await IssueService(db_session).update_issue(
            issue.id, SecurityIssueUpdate(mitre_attack_id=None)
        )

        assert updated.mitre_attack_id is None

    async def test_explicit_null_on_required_field_rejected(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        issue = await make_issue(db_session, container.id, user.id)

        with pytest.raises(ValidationFailure, match="title cannot be null"):
            await IssueService(db_session).update_issue(issue.id, SecurityIssueUpdate(title=None))

    async def test_assign_to_unknown_user(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        issue = await make_issue(db_session, container.id, user.id)

        with pytest.raises(NotFoundError, match="User with id 555 not found"):
            await IssueService(db_session).update_issue(issue.id, SecurityIssueUpdate(assigned_to=555))

    async def test_unknown_issue(self, db_session):
        with pytest.raises(NotFoundError, match="SecurityIssue with id 999999 not found"):
            await IssueService(db_session).update_issue(999999, SecurityIssueUpdate(title="x"))


@pytest.mark.asyncio
class TestListIssues:
    async def test_risk_range_is_inclusive_and_ordered(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        for score in (49.99, 50, 70, 90, 90.01):
            await make_issue(db_session, container.id, user.id, title=f"score {score}", risk_score=score)

        issues = await IssueService(db_session).list_issues(
            SecurityIssueFilter(risk_score_min=50, risk_score_max=90)
        )

        assert [i.risk_score for i in issues] == [Decimal("90.00"), Decimal("70.00"), Decimal("50.00")]

    async def test_equal_scores_order_by_severity_then_newest(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        now = utcnow()
        await make_issue(db_session, container.id, user.id, title="low", severity="Low", risk_score=40)
        await make_issue(db_session, container.id, user.id, title="critical", severity="Critical", risk_score=40)
        await make_issue(
            db_session, container.id, user.id, title="high old", severity="High",
            risk_score=40, created_at=now - timedelta(days=2),
        )
        await make_issue(db_session, container.id, user.id, title="high new", severity="High", risk_score=40)

        issues = await IssueService(db_session).list_issues()

        assert [i.title for i in issues] == ["critical", "high new", "high old", "low"]

    async def test_filters_are_anded(self, db_session):
        user = await make_user(db_session)
        other = await make_user(db_session, username="responder")
        container = await make_container(db_session, user.id)
        match = await make_issue(db_session, container.id, user.id, severity="High", assigned_to=other.id)
        await make_issue(db_session, container.id, user.id, severity="High")
        await make_issue(db_session, container.id, user.id, severity="Low", assigned_to=other.id)

        issues = await IssueService(db_session).list_issues(
            SecurityIssueFilter(severity="High", assigned_to=other.id)
        )

        assert [i.id for i in issues] == [match.id]

    async def test_created_range(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        start = datetime(2024, 1, 1)
        await make_issue(db_session, container.id, user.id, title="before", created_at=start - timedelta(seconds=1))
        await make_issue(db_session, container.id, user.id, title="edge", created_at=start)
        await make_issue(db_session, container.id, user.id, title="inside", created_at=start + timedelta(days=3))
        await make_issue(db_session, container.id, user.id, title="after", created_at=start + timedelta(days=10))

        issues = await IssueService(db_session).list_issues(
            SecurityIssueFilter(created_after=start, created_before=start + timedelta(days=3))
        )

        assert sorted(i.title for i in issues) == ["edge", "inside"]

    async def test_limit_and_offset(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        for score in (10, 20, 30, 40, 50):
            await make_issue(db_session, container.id, user.id, risk_score=score)

        page = await IssueService(db_session).list_issues(SecurityIssueFilter(limit=2, offset=1))

        assert [i.risk_score for i in page] == [Decimal("40.00"), Decimal("30.00")]

    async def test_by_container_orders_task_story_epic(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        other = await make_container(db_session, user.id, name="Other")
        await make_issue(db_session, container.id, user.id, title="epic", hierarchy="Epic", risk_score=99)
        await make_issue(db_session, container.id, user.id, title="story", hierarchy="Story", risk_score=50)
        await make_issue(db_session, container.id, user.id, title="task low", hierarchy="Task", risk_score=10)
        await make_issue(db_session, container.id, user.id, title="task high", hierarchy="Task", risk_score=80)
        await make_issue(db_session, other.id, user.id, title="elsewhere")

        issues = await IssueService(db_session).list_issues_by_container(container.id)

        assert [i.title for i in issues] == ["task high", "task low", "story", "epic"]

    async def test_by_unknown_container_is_empty(self, db_session):
        assert await IssueService(db_session).list_issues_by_container(999999) == []
