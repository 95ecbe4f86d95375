from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.api.deps import committer_dep, db_session
from mediavault.api.envelope import success
from mediavault.api.schemas import MediaOut, UserOut
from mediavault.auth.deps import get_principal
from mediavault.auth.models import Principal
from mediavault.db.repositories.users import UserRepo
from mediavault.errors import NotFound
from mediavault.services.ingestion import IngestionCommitter

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me")
async def current_user(
    request: Request,
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    user = await UserRepo(session).get(principal.id)
    if user is None:
        raise NotFound("User", principal.id)
    return success(request, UserOut.model_validate(user), message="User retrieved successfully")


@router.get("/{user_id}/media")
async def user_media(
    request: Request,
    user_id: int,
    _: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
    committer: IngestionCommitter = Depends(committer_dep),
) -> JSONResponse:
    if await UserRepo(session).get(user_id) is None:
        raise NotFound("User", user_id)
    media = await committer.list_for_owner(user_id)
    return success(
        request,
        [MediaOut.model_validate(m) for m in media],
        message="User media files retrieved successfully",
    )
