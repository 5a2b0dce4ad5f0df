"""
Architecture components: the boxes of a container's architecture diagram,
annotated with trust boundary, network zone and data classification.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.database import utcnow
from primesec.models import ArchitectureComponent, Container, User
from primesec.schemas.schemas import ArchitectureComponentCreate, ArchitectureComponentFilter
from primesec.services.references import require_row

logger = logging.getLogger(__name__)


class ArchitectureService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_component(self, data: ArchitectureComponentCreate) -> ArchitectureComponent:
        await require_row(self.session, Container, data.container_id)
        await require_row(self.session, User, data.created_by)

        component = ArchitectureComponent(
            **data.model_dump(),
            is_active=True,
        )
        self.session.add(component)
        await self.session.flush()
        logger.info(
            "Created %s component %s in container %s",
            component.component_type, component.id, component.container_id,
        )
        return component

    async def list_components(
        self, filters: ArchitectureComponentFilter | None = None
    ) -> list[ArchitectureComponent]:
        filters = filters or ArchitectureComponentFilter()

        conditions = []
        if filters.component_type is not None:
            conditions.append(ArchitectureComponent.component_type == filters.component_type)
        if filters.security_domain is not None:
            conditions.append(ArchitectureComponent.security_domain == filters.security_domain)
        if filters.container_id is not None:
            conditions.append(ArchitectureComponent.container_id == filters.container_id)
        if filters.trust_boundary is not None:
            conditions.append(ArchitectureComponent.trust_boundary == filters.trust_boundary)
        if filters.network_zone is not None:
            conditions.append(ArchitectureComponent.network_zone == filters.network_zone)
        if filters.is_active is not None:
            conditions.append(ArchitectureComponent.is_active == filters.is_active)

        result = await self.session.execute(
            select(ArchitectureComponent)
            .where(*conditions)
            .order_by(ArchitectureComponent.created_at.desc(), ArchitectureComponent.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return list(result.scalars().all())

    async def list_components_by_container(self, container_id: int) -> list[ArchitectureComponent]:
        """Active components of an existing container, in creation order."""
        await require_row(self.session, Container, container_id)
        result = await self.session.execute(
            select(ArchitectureComponent)
            .where(
                ArchitectureComponent.container_id == container_id,
                ArchitectureComponent.is_active == True,  # noqa: E712
            )
            .order_by(ArchitectureComponent.created_at.asc(), ArchitectureComponent.id.asc())
        )
        return list(result.scalars().all())

    async def deactivate_component(self, component_id: int) -> ArchitectureComponent:
        component = await require_row(self.session, ArchitectureComponent, component_id)
        component.is_active = False
        component.updated_at = utcnow()
        await self.session.flush()
        logger.info("Deactivated architecture component %s", component_id)
        return component
