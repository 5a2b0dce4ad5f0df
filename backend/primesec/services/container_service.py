import logging
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.database import utcnow
from primesec.models import Container, SecurityIssue, User
from primesec.schemas.schemas import ContainerCreate
from primesec.services.references import require_row
from primesec.services.scoring_engine import ScoringEngine, quantize_score, to_decimal

logger = logging.getLogger(__name__)


class ContainerService:
    """Containers (projects / applications / systems / services)."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.scoring = ScoringEngine(session)

    async def create_container(self, data: ContainerCreate) -> Container:
        await require_row(self.session, User, data.created_by)

        container = Container(
            name=data.name,
            description=data.description,
            type=data.type.value,
            risk_score=Decimal("0"),
            external_id=data.external_id,
            external_system=data.external_system,
            created_by=data.created_by,
            is_active=True,
        )
        self.session.add(container)
        await self.session.flush()
        logger.info("Created container %s (%s)", container.id, container.type)
        return container

    async def list_active_containers(self) -> list[tuple[Container, Decimal]]:
        """
        Active containers paired with the live mean of their issues' scores.

        The stored risk_score may lag behind the issue set; the paired value
        is computed at read time (0 when the container has no issues).
        """
        avg_score = func.coalesce(func.avg(SecurityIssue.risk_score), 0).label("avg_score")
        result = await self.session.execute(
            select(Container, avg_score)
            .outerjoin(SecurityIssue, SecurityIssue.container_id == Container.id)
            .where(Container.is_active == True)  # noqa: E712
            .group_by(Container.id)
            .order_by(Container.id.asc())
        )
        return [(row[0], quantize_score(to_decimal(row[1]))) for row in result.all()]

    async def update_risk_score(self, container_id: int) -> Container:
        return await self.scoring.recompute_container_score(container_id)

    async def deactivate_container(self, container_id: int) -> Container:
        container = await require_row(self.session, Container, container_id)
        container.is_active = False
        container.updated_at = utcnow()
        await self.session.flush()
        logger.info("Deactivated container %s", container_id)
        return container
