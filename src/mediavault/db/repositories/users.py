from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.db.models import Role, User, UserStatus


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        email: str,
        name: str | None = None,
        role: Role | None = Role.user,
        status: UserStatus = UserStatus.active,
    ) -> User:
        user = User(email=email, name=name, role=role, status=status)
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: int) -> User | None:
        # populate_existing: the auth gate must see the current row, not an identity-map copy.
        return await self._session.get(User, user_id, populate_existing=True)

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return (await self._session.execute(stmt)).scalar_one_or_none()
