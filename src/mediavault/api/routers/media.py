"""
mediavault.api.routers.media

Media endpoints.

Responsibilities:
- Accept multipart uploads: spool -> admit each file -> commit admitted files.
- Apply the configured batch policy and report per-file outcomes.
- Read (with view counting), update and delete media.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from starlette.status import HTTP_201_CREATED, HTTP_207_MULTI_STATUS

from mediavault.api.deps import committer_dep, settings_dep, storage_dep
from mediavault.api.envelope import success
from mediavault.api.schemas import MediaOut
from mediavault.auth.deps import get_principal
from mediavault.auth.models import Principal
from mediavault.errors import AdmissionError, PayloadTooLarge, PersistenceFailure, ValidationError
from mediavault.ingestion.admission import AdmissionOutcome, admit
from mediavault.ingestion.intake import discard_spooled, spool_upload, spool_uploads
from mediavault.ingestion.storage import MediaStorage
from mediavault.observability.logging import get_logger
from mediavault.services.ingestion import CommitResult, IngestionCommitter
from mediavault.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/media", tags=["media"])


Rejection = tuple[AdmissionOutcome, AdmissionError]


def _rejections(outcomes: list[AdmissionOutcome]) -> list[Rejection]:
    return [(o, o.error) for o in outcomes if o.error is not None]


def _rejection_detail(outcome: AdmissionOutcome, error: AdmissionError) -> dict[str, Any]:
    detail = error.detail(file=outcome.candidate.original_name)
    detail["index"] = outcome.index
    return detail


def _failure_details(result: CommitResult) -> list[dict[str, Any]]:
    return [
        {
            "message": f.error.message,
            "file": f.file.candidate.original_name,
            "code": f.error.code,
        }
        for f in result.failed
    ]


def _rejected_error(rejected: list[Rejection]) -> ValidationError:
    if len(rejected) == 1:
        message = rejected[0][1].message
    else:
        message = f"{len(rejected)} files were rejected"
    return ValidationError(message, errors=[_rejection_detail(o, e) for o, e in rejected])


@router.post("")
async def upload_media(
    request: Request,
    files: list[UploadFile] = File(...),
    tags: list[int] | None = Form(default=None),
    principal: Principal = Depends(get_principal),
    settings: Settings = Depends(settings_dep),
    storage: MediaStorage = Depends(storage_dep),
    committer: IngestionCommitter = Depends(committer_dep),
) -> JSONResponse:
    if len(files) > settings.upload_max_files:
        raise PayloadTooLarge(f"At most {settings.upload_max_files} files per upload")

    candidates = await spool_uploads(
        files, storage=storage, max_bytes=settings.upload_max_field_bytes
    )
    try:
        outcomes = admit(candidates, sniff_content=settings.content_sniffing)
        rejected = _rejections(outcomes)
        admitted = [o.admitted for o in outcomes if o.admitted is not None]
        for o, error in rejected:
            log.info(
                "upload_rejected",
                file=o.candidate.original_name,
                code=error.code,
                reason=error.message,
            )

        if rejected and (settings.upload_policy == "all_or_nothing" or not admitted):
            raise _rejected_error(rejected)

        result = await committer.commit(owner_id=principal.id, admitted=admitted, tag_ids=tags)
    finally:
        discard_spooled(candidates)

    rejection_details = [_rejection_detail(o, e) for o, e in rejected]
    if not result.created:
        raise PersistenceFailure(
            "Failed to upload media files",
            errors=_failure_details(result) + rejection_details,
        )

    data = {
        "created": [MediaOut.model_validate(m) for m in result.created],
        "rejected": rejection_details,
        "failed": _failure_details(result),
    }
    if rejected or result.failed:
        return success(
            request,
            data,
            message="Some media files were not uploaded",
            status_code=HTTP_207_MULTI_STATUS,
        )
    return success(
        request,
        data,
        message="Media files uploaded successfully",
        status_code=HTTP_201_CREATED,
    )


@router.get("", dependencies=[Depends(get_principal)])
async def list_media(
    request: Request,
    committer: IngestionCommitter = Depends(committer_dep),
) -> JSONResponse:
    media = await committer.list_all()
    return success(
        request,
        [MediaOut.model_validate(m) for m in media],
        message="Media files retrieved successfully",
    )


@router.get("/{media_id}", dependencies=[Depends(get_principal)])
async def get_media(
    request: Request,
    media_id: int,
    committer: IngestionCommitter = Depends(committer_dep),
) -> JSONResponse:
    media = await committer.find_by_id(media_id)
    return success(
        request, MediaOut.model_validate(media), message="Media file retrieved successfully"
    )


@router.patch("/{media_id}")
async def update_media(
    request: Request,
    media_id: int,
    tags: list[int] | None = Form(default=None),
    file: UploadFile | None = File(default=None),
    principal: Principal = Depends(get_principal),
    settings: Settings = Depends(settings_dep),
    storage: MediaStorage = Depends(storage_dep),
    committer: IngestionCommitter = Depends(committer_dep),
) -> JSONResponse:
    if file is None:
        media = await committer.update(media_id, actor=principal, tag_ids=tags)
        return success(
            request, MediaOut.model_validate(media), message="Media file updated successfully"
        )

    # Strangers get 404 before any of their bytes are spooled or judged.
    await committer.ensure_modifiable(media_id, actor=principal)
    candidate = await spool_upload(
        file, storage=storage, max_bytes=settings.upload_max_field_bytes
    )
    try:
        outcomes = admit([candidate], sniff_content=settings.content_sniffing)
        rejected = _rejections(outcomes)
        if rejected:
            raise _rejected_error(rejected)
        media = await committer.update(
            media_id, actor=principal, tag_ids=tags, replacement=outcomes[0].admitted
        )
    finally:
        discard_spooled([candidate])
    return success(
        request, MediaOut.model_validate(media), message="Media file updated successfully"
    )


@router.delete("/{media_id}")
async def delete_media(
    request: Request,
    media_id: int,
    principal: Principal = Depends(get_principal),
    committer: IngestionCommitter = Depends(committer_dep),
) -> JSONResponse:
    await committer.remove(media_id, actor=principal)
    return success(request, None, message="Media file deleted successfully")
