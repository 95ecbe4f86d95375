"""
mediavault.db.repositories.media

Repository for `Media` entities.

Responsibilities:
- Insert and fetch media rows with their tags loaded explicitly.
- Apply the view counter increment as a single UPDATE in the database.
"""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mediavault.db.models import Media, MediaCategory, Tag


class MediaRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        owner_id: int,
        storage_path: str,
        display_name: str,
        category: MediaCategory,
        extension: str,
        size_bytes: int,
        tags: list[Tag],
    ) -> Media:
        media = Media(
            owner_id=owner_id,
            storage_path=storage_path,
            display_name=display_name,
            category=category,
            extension=extension,
            size_bytes=size_bytes,
            view_count=0,
            tags=tags,
        )
        self._session.add(media)
        await self._session.flush()
        return media

    async def get(self, media_id: int) -> Media | None:
        stmt = (
            select(Media)
            .where(Media.id == media_id)
            .options(selectinload(Media.tags))
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self) -> list[Media]:
        stmt = select(Media).options(selectinload(Media.tags)).order_by(Media.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def list_for_owner(self, owner_id: int) -> list[Media]:
        stmt = (
            select(Media)
            .where(Media.owner_id == owner_id)
            .options(selectinload(Media.tags))
            .order_by(Media.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def increment_views(self, media_id: int) -> bool:
        # view_count = view_count + 1 is evaluated by the database, so concurrent
        # readers never overwrite each other's increments.
        stmt = (
            update(Media)
            .where(Media.id == media_id)
            .values(view_count=Media.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def delete(self, media: Media) -> None:
        await self._session.delete(media)
        await self._session.flush()
