"""
Risk Scoring Engine

Issue score (0-100) from five impact dimensions:
  risk_score = 0.25*C + 0.25*I + 0.25*A + 0.15*Compliance + 0.10*ThirdParty

Container score, three separate policies:
  (a) average        - plain mean over ALL issues; runs after issue writes
  (b) weighted open  - severity-weighted mean over Open issues only, clamped
                       to 100; runs on the explicit recompute operation
  (c) analytics mean - plain mean over ALL issues, read-only

All arithmetic is done in Decimal and quantized to 0.01 with ROUND_HALF_UP.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.database import utcnow
from primesec.errors import NotFoundError
from primesec.middleware.metrics import container_risk_recomputes_total
from primesec.models import Container, SecurityIssue
from primesec.models.enums import IssueStatus

logger = logging.getLogger(__name__)

IMPACT_WEIGHTS: dict[str, Decimal] = {
    "confidentiality_impact": Decimal("0.25"),
    "integrity_impact": Decimal("0.25"),
    "availability_impact": Decimal("0.25"),
    "compliance_impact": Decimal("0.15"),
    "third_party_risk": Decimal("0.10"),
}

SEVERITY_WEIGHTS: dict[str, Decimal] = {
    "Critical": Decimal("1.0"),
    "High": Decimal("0.8"),
    "Medium": Decimal("0.6"),
    "Low": Decimal("0.3"),
}

MAX_SCORE = Decimal("100")
_CENTS = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Convert a float/int/Decimal/None coming from input or the store."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_score(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def calculate_issue_risk_score(
    confidentiality_impact,
    integrity_impact,
    availability_impact,
    compliance_impact,
    third_party_risk,
) -> Decimal:
    """Weighted combination of the five impact dimensions, 2 decimals."""
    dimensions = {
        "confidentiality_impact": confidentiality_impact,
        "integrity_impact": integrity_impact,
        "availability_impact": availability_impact,
        "compliance_impact": compliance_impact,
        "third_party_risk": third_party_risk,
    }
    total = sum(
        (to_decimal(value) * IMPACT_WEIGHTS[name] for name, value in dimensions.items()),
        Decimal("0"),
    )
    return quantize_score(min(total, MAX_SCORE))


def weighted_open_score(issues: list[tuple[Decimal, str]]) -> Decimal:
    """
    Severity-weighted mean of (risk_score, severity) pairs.

    Callers pass Open issues only. Returns 0 for an empty list.
    """
    total_weighted = Decimal("0")
    total_weight = Decimal("0")
    for score, severity in issues:
        weight = SEVERITY_WEIGHTS[severity]
        total_weighted += to_decimal(score) * weight
        total_weight += weight

    if total_weight == 0:
        return Decimal("0.00")
    return quantize_score(min(total_weighted / total_weight, MAX_SCORE))


@dataclass
class RecomputeOutcome:
    """Result of a container recompute that must not fail the triggering write."""

    container_id: int
    policy: str
    risk_score: Decimal | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ScoringEngine:
    """Computes and persists container risk scores from their issues."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def mean_issue_score(self, container_id: int) -> Decimal:
        """Plain mean of risk_score over every issue in the container (any status)."""
        result = await self.session.execute(
            select(func.avg(SecurityIssue.risk_score)).where(
                SecurityIssue.container_id == container_id
            )
        )
        avg = result.scalar()
        return quantize_score(to_decimal(avg))

    async def weighted_open_issue_score(self, container_id: int) -> Decimal:
        result = await self.session.execute(
            select(SecurityIssue.risk_score, SecurityIssue.severity).where(
                SecurityIssue.container_id == container_id,
                SecurityIssue.status == IssueStatus.OPEN.value,
            )
        )
        return weighted_open_score([(row[0], row[1]) for row in result])

    async def _get_container(self, container_id: int) -> Container:
        container = await self.session.get(Container, container_id)
        if container is None:
            raise NotFoundError("Container", container_id)
        return container

    async def apply_average_score(self, container_id: int) -> Container:
        """Policy (a): persist the plain mean over all of the container's issues."""
        container = await self._get_container(container_id)
        container.risk_score = await self.mean_issue_score(container_id)
        container.updated_at = utcnow()
        await self.session.flush()
        return container

    async def refresh_after_issue_write(self, container_id: int) -> RecomputeOutcome:
        """
        Run policy (a) as a secondary step of an issue write.

        Failures are logged and reported in the outcome instead of raised,
        so the issue write that triggered the recompute still succeeds. The
        recompute runs in a savepoint; a failed flush rolls back only the
        savepoint and leaves the caller's transaction usable.
        """
        try:
            async with self.session.begin_nested():
                container = await self.apply_average_score(container_id)
        except Exception as exc:
            logger.warning(
                "Container %s risk recompute failed after issue write: %s",
                container_id, exc, exc_info=True,
            )
            container_risk_recomputes_total.labels(policy="average", outcome="failed").inc()
            return RecomputeOutcome(
                container_id=container_id,
                policy="average",
                error=f"{type(exc).__name__}: {exc}",
            )

        container_risk_recomputes_total.labels(policy="average", outcome="ok").inc()
        return RecomputeOutcome(
            container_id=container_id,
            policy="average",
            risk_score=container.risk_score,
        )

    async def recompute_container_score(self, container_id: int) -> Container:
        """Policy (b): persist the severity-weighted mean of Open issues."""
        container = await self._get_container(container_id)
        container.risk_score = await self.weighted_open_issue_score(container_id)
        container.updated_at = utcnow()
        await self.session.flush()

        container_risk_recomputes_total.labels(policy="weighted_open", outcome="ok").inc()
        logger.info(
            "Container %s risk score recomputed (weighted open): %s",
            container_id, container.risk_score,
        )
        return container
