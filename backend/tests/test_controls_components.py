"""Tests for security controls and architecture components."""

from decimal import Decimal

import pytest

from primesec.errors import NotFoundError
from primesec.schemas.schemas import (
    ArchitectureComponentCreate,
    ArchitectureComponentFilter,
    SecurityControlCreate,
    SecurityControlFilter,
)
from primesec.services.architecture_service import ArchitectureService
from primesec.services.control_service import ControlService
from tests.conftest import make_container, make_user


def _control(container_id: int, created_by: int, **overrides) -> SecurityControlCreate:
    values = {
        "name": "MFA for administrators",
        "control_type": "Preventive",
        "implementation_status": "Existing",
        "framework_reference": "NIST 800-53",
        "control_family": "IA",
        "container_id": container_id,
        "created_by": created_by,
    }
    values.update(overrides)
    return SecurityControlCreate(**values)


def _component(container_id: int, created_by: int, **overrides) -> ArchitectureComponentCreate:
    values = {
        "name": "API Gateway",
        "component_type": "Gateway",
        "security_domain": "Edge",
        "trust_boundary": "Internet",
        "network_zone": "DMZ",
        "container_id": container_id,
        "created_by": created_by,
    }
    values.update(overrides)
    return ArchitectureComponentCreate(**values)


@pytest.mark.asyncio
class TestSecurityControls:
    async def test_create_keeps_effectiveness(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)

        control = await ControlService(db_session).create_control(
            _control(container.id, user.id, effectiveness_rating=87.25)
        )

        assert control.is_active is True
        assert control.effectiveness_rating == Decimal("87.25")

    async def test_create_unknown_container(self, db_session):
        user = await make_user(db_session)
        with pytest.raises(NotFoundError, match="Container with id 999999 not found"):
            await ControlService(db_session).create_control(_control(999999, user.id))

    async def test_filters(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        service = ControlService(db_session)
        planned = await service.create_control(
            _control(container.id, user.id, name="WAF", implementation_status="Planned")
        )
        await service.create_control(_control(container.id, user.id, framework_reference="ISO 27001"))

        result = await service.list_controls(
            SecurityControlFilter(implementation_status="Planned", framework_reference="NIST 800-53")
        )

        assert [c.id for c in result] == [planned.id]

    async def test_by_container_includes_inactive(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        service = ControlService(db_session)
        kept = await service.create_control(_control(container.id, user.id))
        retired = await service.create_control(_control(container.id, user.id, name="Legacy VPN"))
        await service.deactivate_control(retired.id)

        controls = await service.list_controls_by_container(container.id)
        active = await service.list_controls(SecurityControlFilter(is_active=True))

        assert {c.id for c in controls} == {kept.id, retired.id}
        assert [c.id for c in active] == [kept.id]

    async def test_deactivate_unknown(self, db_session):
        with pytest.raises(NotFoundError, match="SecurityControl with id 5 not found"):
            await ControlService(db_session).deactivate_control(5)


@pytest.mark.asyncio
class TestArchitectureComponents:
    async def test_create_keeps_positions(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)

        component = await ArchitectureService(db_session).create_component(
            _component(container.id, user.id, position_x=120.5, position_y=-40.25)
        )

        assert component.position_x == 120.5
        assert component.position_y == -40.25
        assert component.is_active is True

    async def test_create_unknown_creator(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        with pytest.raises(NotFoundError, match="User with id 999999 not found"):
            await ArchitectureService(db_session).create_component(_component(container.id, 999999))

    async def test_filters(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        service = ArchitectureService(db_session)
        db = await service.create_component(
            _component(container.id, user.id, name="Orders DB", component_type="Database",
                       network_zone="Internal")
        )
        await service.create_component(_component(container.id, user.id))

        result = await service.list_components(
            ArchitectureComponentFilter(component_type="Database", network_zone="Internal")
        )

        assert [c.id for c in result] == [db.id]

    async def test_by_container_returns_active_only(self, db_session):
        user = await make_user(db_session)
        container = await make_container(db_session, user.id)
        service = ArchitectureService(db_session)
        gateway = await service.create_component(_component(container.id, user.id))
        queue = await service.create_component(_component(container.id, user.id, name="Queue"))
        await service.deactivate_component(queue.id)

        components = await service.list_components_by_container(container.id)

        assert [c.id for c in components] == [gateway.id]

    async def test_by_unknown_container(self, db_session):
        with pytest.raises(NotFoundError, match="Container with id 999999 not found"):
            await ArchitectureService(db_session).list_components_by_container(999999)
