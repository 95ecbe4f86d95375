"""
tests.test_ingestion_service

IngestionCommitter against a real SQLite database and storage root.

Responsibilities:
- Per-file commit units and the failure-at-N contract.
- Unknown tag ids dropped silently.
- Atomic view counting under concurrent reads.
- Ownership checks on update/remove.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError

from mediavault.auth.models import Principal
from mediavault.db.models import MediaCategory, Role, UserStatus
from mediavault.db.repositories.media import MediaRepo
from mediavault.db.repositories.tags import TagRepo
from mediavault.errors import NotFound, PersistenceFailure, SizeExceeded
from mediavault.ingestion.admission import AdmittedFile, UploadCandidate, admit
from mediavault.ingestion.storage import MediaStorage
from mediavault.services.ingestion import IngestionCommitter
from tests.payloads import MIB, pdf, png


def _admitted(storage: MediaStorage, name: str, data: bytes, mime: str) -> AdmittedFile:
    location = storage.incoming_path()
    location.write_bytes(data)
    (outcome,) = admit(
        [
            UploadCandidate(
                original_name=name,
                declared_mime_type=mime,
                byte_size=len(data),
                temporary_location=location,
            )
        ],
        sniff_content=True,
    )
    assert outcome.admitted is not None
    return outcome.admitted


def _stored_files(storage: MediaStorage, directory: str) -> list[Path]:
    return sorted((storage.root / directory).iterdir())


def _principal(user_id: int, role: Role = Role.user) -> Principal:
    return Principal(
        id=user_id, email=f"{user_id}@example.com", role=role, status=UserStatus.active
    )


@pytest.mark.asyncio
async def test_oversized_video_creates_nothing(
    committer: IngestionCommitter, create_user
) -> None:
    await create_user("owner@example.com")
    (outcome,) = admit(
        [
            UploadCandidate(
                original_name="movie.mp4",
                declared_mime_type="video/mp4",
                byte_size=60 * MIB,
                temporary_location=Path("/unused"),
            )
        ],
        sniff_content=True,
    )

    assert isinstance(outcome.error, SizeExceeded)
    assert outcome.error.limit == 50 * MIB
    assert outcome.admitted is None
    assert await committer.list_all() == []


@pytest.mark.asyncio
async def test_commit_places_bytes_and_records_metadata(
    committer: IngestionCommitter, storage: MediaStorage, create_user
) -> None:
    owner_id = await create_user("owner@example.com")
    item = _admitted(storage, "report.pdf", pdf(2048), "application/pdf")

    result = await committer.commit(owner_id=owner_id, admitted=[item])

    assert result.failed == []
    (media,) = result.created
    assert media.owner_id == owner_id
    assert media.category == MediaCategory.pdf
    assert media.extension == "pdf"
    assert media.size_bytes == 2048
    assert media.view_count == 0
    assert media.storage_path.startswith("media/")
    assert storage.resolve(media.storage_path).read_bytes() == pdf(2048)
    assert not item.candidate.temporary_location.exists()


@pytest.mark.asyncio
async def test_unknown_tag_ids_are_dropped(
    app, committer: IngestionCommitter, storage: MediaStorage, create_user
) -> None:
    owner_id = await create_user("owner@example.com")
    async with app.state.sessionmaker() as session:
        tag = await TagRepo(session).create(name="holiday")
        await session.commit()

    result = await committer.commit(
        owner_id=owner_id,
        admitted=[_admitted(storage, "a.png", png(), "image/png")],
        tag_ids=[999, tag.id, tag.id],
    )

    (media,) = result.created
    assert media.tag_ids == [tag.id]


@pytest.mark.asyncio
async def test_failure_at_n_keeps_earlier_files(
    committer: IngestionCommitter,
    storage: MediaStorage,
    create_user,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    owner_id = await create_user("owner@example.com")
    items = [_admitted(storage, f"{i}.png", png(), "image/png") for i in range(3)]

    original_create = MediaRepo.create
    calls = 0

    async def flaky_create(self, **kwargs):
        nonlocal calls
        calls += 1
        if calls == 2:
            raise OperationalError("INSERT INTO media", {}, Exception("disk I/O error"))
        return await original_create(self, **kwargs)

    monkeypatch.setattr(MediaRepo, "create", flaky_create)

    result = await committer.commit(owner_id=owner_id, admitted=items)

    assert [m.display_name for m in result.created] == ["0.png"]
    assert [f.file.candidate.original_name for f in result.failed] == ["1.png", "2.png"]
    first_failure, not_attempted = (f.error for f in result.failed)
    assert isinstance(first_failure, PersistenceFailure)
    assert isinstance(first_failure.cause, OperationalError)
    assert first_failure.status_code == 500
    assert "earlier failure" in not_attempted.message

    # Only the committed file's bytes remain in storage.
    assert [p.name for p in _stored_files(storage, "images")] == [
        result.created[0].storage_path.split("/")[-1]
    ]
    assert [m.id for m in await committer.list_all()] == [result.created[0].id]


@pytest.mark.asyncio
async def test_concurrent_reads_count_every_view(
    committer: IngestionCommitter, storage: MediaStorage, create_user
) -> None:
    owner_id = await create_user("owner@example.com")
    result = await committer.commit(
        owner_id=owner_id, admitted=[_admitted(storage, "a.png", png(), "image/png")]
    )
    media_id = result.created[0].id

    reads = 10
    await asyncio.gather(*(committer.find_by_id(media_id) for _ in range(reads)))

    media = await committer.find_by_id(media_id)
    assert media.view_count == reads + 1


@pytest.mark.asyncio
async def test_find_missing_media(committer: IngestionCommitter) -> None:
    with pytest.raises(NotFound, match="Media with ID 999 not found"):
        await committer.find_by_id(999)


@pytest.mark.asyncio
async def test_update_and_remove_require_owner_or_admin(
    committer: IngestionCommitter, storage: MediaStorage, create_user
) -> None:
    owner_id = await create_user("owner@example.com")
    other_id = await create_user("other@example.com")
    admin_id = await create_user("admin@example.com", role=Role.admin)
    result = await committer.commit(
        owner_id=owner_id, admitted=[_admitted(storage, "a.png", png(), "image/png")]
    )
    media = result.created[0]

    with pytest.raises(NotFound):
        await committer.update(media.id, actor=_principal(other_id), tag_ids=[])
    with pytest.raises(NotFound):
        await committer.remove(media.id, actor=_principal(other_id))

    await committer.remove(media.id, actor=_principal(admin_id, Role.admin))
    assert not storage.exists(media.storage_path)
    with pytest.raises(NotFound):
        await committer.find_by_id(media.id)


@pytest.mark.asyncio
async def test_replacement_swaps_stored_object(
    committer: IngestionCommitter, storage: MediaStorage, create_user
) -> None:
    owner_id = await create_user("owner@example.com")
    result = await committer.commit(
        owner_id=owner_id, admitted=[_admitted(storage, "a.png", png(), "image/png")]
    )
    before = result.created[0]

    after = await committer.update(
        before.id,
        actor=_principal(owner_id),
        replacement=_admitted(storage, "b.pdf", pdf(), "application/pdf"),
    )

    assert after.category == MediaCategory.pdf
    assert after.display_name == "b.pdf"
    assert after.storage_path != before.storage_path
    assert storage.exists(after.storage_path)
    assert not storage.exists(before.storage_path)


@pytest.mark.asyncio
async def test_remove_tolerates_missing_object(
    committer: IngestionCommitter, storage: MediaStorage, create_user
) -> None:
    owner_id = await create_user("owner@example.com")
    result = await committer.commit(
        owner_id=owner_id, admitted=[_admitted(storage, "a.png", png(), "image/png")]
    )
    media = result.created[0]
    storage.discard(media.storage_path)

    await committer.remove(media.id, actor=_principal(owner_id))

    assert await committer.list_for_owner(owner_id) == []
