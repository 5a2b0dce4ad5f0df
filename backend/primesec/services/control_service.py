import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.database import utcnow
from primesec.models import Container, SecurityControl, User
from primesec.schemas.schemas import SecurityControlCreate, SecurityControlFilter
from primesec.services.references import require_row
from primesec.services.scoring_engine import to_decimal

logger = logging.getLogger(__name__)


class ControlService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_control(self, data: SecurityControlCreate) -> SecurityControl:
        await require_row(self.session, Container, data.container_id)
        await require_row(self.session, User, data.created_by)

        control = SecurityControl(
            name=data.name,
            description=data.description,
            control_type=data.control_type,
            implementation_status=data.implementation_status.value,
            effectiveness_rating=(
                to_decimal(data.effectiveness_rating)
                if data.effectiveness_rating is not None else None
            ),
            framework_reference=data.framework_reference,
            control_family=data.control_family,
            implementation_notes=data.implementation_notes,
            testing_frequency=data.testing_frequency,
            last_tested=data.last_tested,
            container_id=data.container_id,
            created_by=data.created_by,
            is_active=True,
        )
        self.session.add(control)
        await self.session.flush()
        logger.info(
            "Created control %s in container %s (%s)",
            control.id, control.container_id, control.implementation_status,
        )
        return control

    async def list_controls(self, filters: SecurityControlFilter | None = None) -> list[SecurityControl]:
        filters = filters or SecurityControlFilter()

        conditions = []
        if filters.implementation_status is not None:
            conditions.append(SecurityControl.implementation_status == filters.implementation_status.value)
        if filters.control_type is not None:
            conditions.append(SecurityControl.control_type == filters.control_type)
        if filters.framework_reference is not None:
            conditions.append(SecurityControl.framework_reference == filters.framework_reference)
        if filters.container_id is not None:
            conditions.append(SecurityControl.container_id == filters.container_id)
        if filters.control_family is not None:
            conditions.append(SecurityControl.control_family == filters.control_family)
        if filters.is_active is not None:
            conditions.append(SecurityControl.is_active == filters.is_active)

        result = await self.session.execute(
            select(SecurityControl)
            .where(*conditions)
            .order_by(SecurityControl.created_at.desc(), SecurityControl.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return list(result.scalars().all())

    async def list_controls_by_container(self, container_id: int) -> list[SecurityControl]:
        """Every control of the container, inactive ones included."""
        result = await self.session.execute(
            select(SecurityControl)
            .where(SecurityControl.container_id == container_id)
            .order_by(SecurityControl.created_at.desc(), SecurityControl.id.desc())
        )
        return list(result.scalars().all())

    async def deactivate_control(self, control_id: int) -> SecurityControl:
        control = await require_row(self.session, SecurityControl, control_id)
        control.is_active = False
        control.updated_at = utcnow()
        await self.session.flush()
        logger.info("Deactivated control %s", control_id)
        return control
