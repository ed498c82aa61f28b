from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_portal.models.user import User


class UserRepository:
    """Lookups for admin accounts."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def fetch_by_id(self, user_id: int) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def fetch_by_username(self, username: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def add(self, user: User) -> User:
        self._session.add(user)
        await self._session.flush()
        return user
