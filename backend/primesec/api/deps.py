"""
API Dependencies — request-scoped DB session.

Authentication is not enforced: user roles are stored as labels only, so
routes depend on the session alone.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from primesec.database import async_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session per request, commit on success, rollback on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
