"""
Users API — account registry. Roles are labels; no access checks apply.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from primesec.api.deps import get_db
from primesec.schemas.schemas import UserCreate, UserFilter, UserOut
from primesec.services.user_service import UserService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserOut, status_code=201)
async def create_user(body: UserCreate, db: AsyncSession = Depends(get_db)):
    return await UserService(db).create_user(body)


@router.get("", response_model=list[UserOut])
async def list_users(
    filters: Annotated[UserFilter, Query()],
    db: AsyncSession = Depends(get_db),
):
    """Users newest first, optionally filtered by role and active flag."""
    return await UserService(db).list_users(filters)
