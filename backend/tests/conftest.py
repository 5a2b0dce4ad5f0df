"""Shared test fixtures for backend tests."""

from datetime import datetime
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from primesec.database import Base
from primesec.main import app
from primesec.api.deps import get_db
from primesec.models import Container, SecurityIssue, User
from primesec.services.scoring_engine import calculate_issue_risk_score, to_decimal

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory schema per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Session for service-level tests; nothing is committed."""
    TestSession = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with TestSession() as session:
        yield session


def _override_db(engine):
    """Per-request session with the same commit/rollback contract as get_db."""
    TestSession = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _get_db():
        async with TestSession() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    return _get_db


@pytest_asyncio.fixture
async def client(engine) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app with get_db bound to the test database."""
    app.dependency_overrides[get_db] = _override_db(engine)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ── Seed helpers ─────────────────────────────────────────────────────────────

async def make_user(session: AsyncSession, username: str = "analyst", **overrides) -> User:
    values = {
        "username": username,
        "email": f"{username}@primesec.test",
        "full_name": username.replace("_", " ").title(),
        "role": "SecurityAnalyst",
        "is_active": True,
    }
    values.update(overrides)
    user = User(**values)
    session.add(user)
    await session.flush()
    return user


async def make_container(session: AsyncSession, created_by: int, name: str = "Payments API", **overrides) -> Container:
    values = {
        "name": name,
        "type": "Application",
        "created_by": created_by,
    }
    values.update(overrides)
    container = Container(**values)
    session.add(container)
    await session.flush()
    return container


async def make_issue(
    session: AsyncSession,
    container_id: int,
    created_by: int,
    title: str = "SQL injection in search",
    severity: str = "High",
    status: str = "Open",
    hierarchy: str = "Task",
    risk_score: float | None = None,
    created_at: datetime | None = None,
    **fields,
) -> SecurityIssue:
    """
    Insert an issue row directly. risk_score is computed from the impact
    keyword arguments unless given explicitly; any other keyword is set on
    the row as-is.
    """
    dims = {
        name: to_decimal(fields.pop(name, 0))
        for name in (
            "confidentiality_impact",
            "integrity_impact",
            "availability_impact",
            "compliance_impact",
            "third_party_risk",
        )
    }
    score = to_decimal(risk_score) if risk_score is not None else calculate_issue_risk_score(**dims)
    issue = SecurityIssue(
        title=title,
        description=f"{title} description",
        severity=severity,
        status=status,
        classification="Vulnerability",
        hierarchy=hierarchy,
        risk_score=score,
        container_id=container_id,
        created_by=created_by,
        **dims,
        **fields,
    )
    if created_at is not None:
        issue.created_at = created_at
        issue.updated_at = created_at
    session.add(issue)
    await session.flush()
    return issue
