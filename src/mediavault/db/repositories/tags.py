"""
mediavault.db.repositories.tags

Repository for `Tag` entities.

Responsibilities:
- CRUD for tags.
- Resolve a list of requested tag ids against the tags that exist right now.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.db.models import Tag


class TagRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, *, name: str) -> Tag:
        tag = Tag(name=name)
        self._session.add(tag)
        await self._session.flush()
        return tag

    async def get(self, tag_id: int) -> Tag | None:
        return await self._session.get(Tag, tag_id)

    async def get_by_name(self, name: str) -> Tag | None:
        stmt = select(Tag).where(Tag.name == name)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self) -> list[Tag]:
        stmt = select(Tag).order_by(Tag.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def resolve(self, tag_ids: Iterable[int]) -> list[Tag]:
        # Unknown ids simply produce no row; callers treat that as "dropped".
        wanted = set(tag_ids)
        if not wanted:
            return []
        stmt = select(Tag).where(Tag.id.in_(wanted)).order_by(Tag.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def delete(self, tag: Tag) -> None:
        await self._session.delete(tag)
        await self._session.flush()
