"""
mediavault.services.ingestion

Media ingestion and lifecycle service.

Responsibilities:
- Commit admitted files: place bytes in storage, insert the media row, attach tags.
- Read media by id with an atomic view counter increment.
- Update tags / replace the stored file, and remove media rows with their objects.

Each file in a batch is committed in its own session. A failure on file N leaves
files before N committed, removes file N's bytes and reports N..end as failed.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mediavault.auth.models import Principal
from mediavault.db.models import Media
from mediavault.db.repositories.media import MediaRepo
from mediavault.db.repositories.tags import TagRepo
from mediavault.errors import NotFound, PersistenceFailure
from mediavault.ingestion.admission import AdmittedFile
from mediavault.ingestion.storage import MediaStorage, StorageNameExhausted, StoredObject
from mediavault.observability.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CommitFailure:
    file: AdmittedFile
    error: PersistenceFailure


@dataclass(slots=True)
class CommitResult:
    created: list[Media] = field(default_factory=list)
    failed: list[CommitFailure] = field(default_factory=list)


class IngestionCommitter:
    def __init__(
        self,
        *,
        session_factory: async_sessionmaker[AsyncSession],
        storage: MediaStorage,
    ) -> None:
        self._session_factory = session_factory
        self._storage = storage

    async def commit(
        self,
        *,
        owner_id: int,
        admitted: Sequence[AdmittedFile],
        tag_ids: Sequence[int] | None = None,
    ) -> CommitResult:
        result = CommitResult()
        requested = list(dict.fromkeys(tag_ids or []))

        for position, item in enumerate(admitted):
            try:
                media = await self._commit_one(owner_id=owner_id, item=item, tag_ids=requested)
            except PersistenceFailure as e:
                result.failed.append(CommitFailure(file=item, error=e))
                for rest in admitted[position + 1 :]:
                    result.failed.append(
                        CommitFailure(
                            file=rest,
                            error=PersistenceFailure(
                                "Not attempted after an earlier failure in the batch"
                            ),
                        )
                    )
                break
            result.created.append(media)

        return result

    async def _commit_one(
        self, *, owner_id: int, item: AdmittedFile, tag_ids: list[int]
    ) -> Media:
        name = item.candidate.original_name
        stored = await self._place(item)

        try:
            async with self._session_factory() as session:
                tags = await TagRepo(session).resolve(tag_ids)
                media = await MediaRepo(session).create(
                    owner_id=owner_id,
                    storage_path=stored.relative_path,
                    display_name=name,
                    category=item.category,
                    extension=item.extension,
                    size_bytes=item.candidate.byte_size,
                    tags=tags,
                )
                await session.commit()
        except SQLAlchemyError as e:
            await asyncio.to_thread(self._storage.discard, stored.relative_path)
            log.error("media_commit_failed", file=name, error=str(e))
            raise PersistenceFailure(f"Failed to save media record for {name}", cause=e) from e

        dropped = sorted(set(tag_ids) - {t.id for t in tags})
        if dropped:
            log.info("media_tags_dropped", media_id=media.id, tag_ids=dropped)
        log.info(
            "media_committed",
            media_id=media.id,
            owner_id=owner_id,
            category=item.category.value,
            size_bytes=item.candidate.byte_size,
        )
        return media

    async def _place(self, item: AdmittedFile) -> StoredObject:
        try:
            return await asyncio.to_thread(
                self._storage.place,
                item.candidate.temporary_location,
                category=item.category,
                extension=item.extension,
            )
        except (OSError, StorageNameExhausted) as e:
            log.error("media_store_failed", file=item.candidate.original_name, error=str(e))
            raise PersistenceFailure(
                f"Failed to store {item.candidate.original_name}", cause=e
            ) from e

    async def find_by_id(self, media_id: int) -> Media:
        async with self._session_factory() as session:
            repo = MediaRepo(session)
            try:
                if not await repo.increment_views(media_id):
                    raise NotFound("Media", media_id)
                await session.commit()
                media = await repo.get(media_id)
            except SQLAlchemyError as e:
                log.error("media_read_failed", media_id=media_id, error=str(e))
                raise PersistenceFailure("Failed to read media file", cause=e) from e
        if media is None:
            # Deleted between the increment and the read.
            raise NotFound("Media", media_id)
        return media

    async def list_all(self) -> list[Media]:
        async with self._session_factory() as session:
            return await MediaRepo(session).list_all()

    async def list_for_owner(self, owner_id: int) -> list[Media]:
        async with self._session_factory() as session:
            return await MediaRepo(session).list_for_owner(owner_id)

    async def update(
        self,
        media_id: int,
        *,
        actor: Principal,
        tag_ids: Sequence[int] | None = None,
        replacement: AdmittedFile | None = None,
    ) -> Media:
        stored: StoredObject | None = None
        async with self._session_factory() as session:
            media = await self._get_modifiable(MediaRepo(session), media_id, actor)
            previous_path = media.storage_path

            if tag_ids is not None:
                media.tags = await TagRepo(session).resolve(tag_ids)
            if replacement is not None:
                stored = await self._place(replacement)
                media.storage_path = stored.relative_path
                media.display_name = replacement.candidate.original_name
                media.category = replacement.category
                media.extension = replacement.extension
                media.size_bytes = replacement.candidate.byte_size

            try:
                await session.commit()
            except SQLAlchemyError as e:
                if stored is not None:
                    await asyncio.to_thread(self._storage.discard, stored.relative_path)
                log.error("media_update_failed", media_id=media_id, error=str(e))
                raise PersistenceFailure("Failed to update media file", cause=e) from e

        if stored is not None:
            await self._discard(previous_path, media_id=media_id)
        log.info("media_updated", media_id=media_id, replaced=stored is not None)
        return media

    async def remove(self, media_id: int, *, actor: Principal) -> None:
        async with self._session_factory() as session:
            repo = MediaRepo(session)
            media = await self._get_modifiable(repo, media_id, actor)
            try:
                await repo.delete(media)
                await session.commit()
            except SQLAlchemyError as e:
                log.error("media_delete_failed", media_id=media_id, error=str(e))
                raise PersistenceFailure("Failed to delete media file", cause=e) from e

        await self._discard(media.storage_path, media_id=media_id)
        log.info("media_removed", media_id=media_id)

    async def ensure_modifiable(self, media_id: int, *, actor: Principal) -> None:
        async with self._session_factory() as session:
            await self._get_modifiable(MediaRepo(session), media_id, actor)

    async def _get_modifiable(self, repo: MediaRepo, media_id: int, actor: Principal) -> Media:
        media = await repo.get(media_id)
        # Other users' media answers like a missing id.
        if media is None or (media.owner_id != actor.id and not actor.is_admin):
            raise NotFound("Media", media_id)
        return media

    async def _discard(self, relative_path: str, *, media_id: int) -> None:
        if not await asyncio.to_thread(self._storage.discard, relative_path):
            log.warning("storage_object_missing", media_id=media_id, storage_path=relative_path)
