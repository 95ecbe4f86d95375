"""
mediavault.ingestion.intake

Spool multipart parts into the storage `.incoming` area as upload candidates.

The per-part byte ceiling enforced here is the transport limit; the
per-category ceilings in `admission` apply on top of it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from pathlib import Path

from fastapi import UploadFile

from mediavault.errors import PayloadTooLarge
from mediavault.ingestion.admission import UploadCandidate
from mediavault.ingestion.storage import MediaStorage

_READ_CHUNK = 1024 * 1024


async def spool_upload(
    upload: UploadFile, *, storage: MediaStorage, max_bytes: int
) -> UploadCandidate:
    target = storage.incoming_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    try:
        with target.open("xb") as out:
            while chunk := await upload.read(_READ_CHUNK):
                written += len(chunk)
                if written > max_bytes:
                    raise PayloadTooLarge(
                        f"File {upload.filename} exceeds the upload limit of {max_bytes} bytes"
                    )
                await asyncio.to_thread(out.write, chunk)
    except BaseException:
        target.unlink(missing_ok=True)
        raise

    return UploadCandidate(
        original_name=upload.filename or "",
        declared_mime_type=upload.content_type,
        byte_size=written,
        temporary_location=target,
    )


async def spool_uploads(
    uploads: Sequence[UploadFile], *, storage: MediaStorage, max_bytes: int
) -> list[UploadCandidate]:
    candidates: list[UploadCandidate] = []
    try:
        for upload in uploads:
            candidates.append(await spool_upload(upload, storage=storage, max_bytes=max_bytes))
    except BaseException:
        discard_spooled(candidates)
        raise
    return candidates


def discard_spooled(candidates: Iterable[UploadCandidate]) -> None:
    # Admitted files were moved out by `MediaStorage.place`; whatever is left is dropped.
    for candidate in candidates:
        Path(candidate.temporary_location).unlink(missing_ok=True)
