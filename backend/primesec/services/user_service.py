import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.models import User
from primesec.schemas.schemas import UserCreate, UserFilter

logger = logging.getLogger(__name__)


class UserService:
    """User accounts. Roles are stored as labels; nothing enforces them."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_user(self, data: UserCreate) -> User:
        # Duplicate username/email surfaces as IntegrityError from the flush.
        user = User(
            username=data.username,
            email=data.email,
            full_name=data.full_name,
            role=data.role.value,
            is_active=data.is_active,
        )
        self.session.add(user)
        await self.session.flush()
        logger.info("Created user %s (%s)", user.id, user.role)
        return user

    async def list_users(self, filters: UserFilter | None = None) -> list[User]:
        filters = filters or UserFilter()

        query = select(User)
        if filters.role is not None:
            query = query.where(User.role == filters.role.value)
        if filters.is_active is not None:
            query = query.where(User.is_active == filters.is_active)

        result = await self.session.execute(
            query.order_by(User.created_at.desc(), User.id.desc())
            .offset(filters.offset)
            .limit(filters.limit)
        )
        return list(result.scalars().all())
