"""
Foreign-key existence checks run before any insert or update.

Every non-null reference must resolve to an existing row of the right
table; otherwise NotFoundError names the entity type and the id.
"""

from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from primesec.errors import NotFoundError

T = TypeVar("T")


async def require_row(session: AsyncSession, model: type[T], entity_id: int) -> T:
    row = await session.get(model, entity_id)
    if row is None:
        raise NotFoundError(model.__name__, entity_id)
    return row


async def require_optional_row(
    session: AsyncSession, model: type[T], entity_id: int | None
) -> T | None:
    if entity_id is None:
        return None
    return await require_row(session, model, entity_id)
