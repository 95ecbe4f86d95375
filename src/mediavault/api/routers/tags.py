"""
mediavault.api.routers.tags

Tag endpoints.

Responsibilities:
- Read tags (any authenticated user).
- Create/rename/delete tags (role=admin).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from mediavault.api.deps import db_session
from mediavault.api.envelope import success
from mediavault.api.schemas import TagOut, TagWrite
from mediavault.auth.deps import get_principal, require_roles
from mediavault.db.models import Role, Tag
from mediavault.db.repositories.tags import TagRepo
from mediavault.errors import Conflict, NotFound, PersistenceFailure

router = APIRouter(prefix="/tags", tags=["tags"])

_DUPLICATE = "Tag with this name already exists"


async def _get_tag(tags: TagRepo, tag_id: int) -> Tag:
    tag = await tags.get(tag_id)
    if tag is None:
        raise NotFound("Tag", tag_id)
    return tag


@router.post("", dependencies=[Depends(require_roles(Role.admin))])
async def create_tag(
    request: Request,
    body: TagWrite,
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    tags = TagRepo(session)
    if await tags.get_by_name(body.name) is not None:
        raise Conflict(_DUPLICATE)
    try:
        tag = await tags.create(name=body.name)
        await session.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent create of the same name.
        await session.rollback()
        raise Conflict(_DUPLICATE) from e
    return success(
        request,
        TagOut.model_validate(tag),
        message="Tag created successfully",
        status_code=HTTP_201_CREATED,
    )


@router.get("", dependencies=[Depends(get_principal)])
async def list_tags(request: Request, session: AsyncSession = Depends(db_session)) -> JSONResponse:
    tags = await TagRepo(session).list_all()
    return success(
        request,
        [TagOut.model_validate(t) for t in tags],
        message="Tags retrieved successfully",
    )


@router.get("/{tag_id}", dependencies=[Depends(get_principal)])
async def get_tag(
    request: Request,
    tag_id: int,
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    tag = await _get_tag(TagRepo(session), tag_id)
    return success(request, TagOut.model_validate(tag), message="Tag retrieved successfully")


@router.patch("/{tag_id}", dependencies=[Depends(require_roles(Role.admin))])
async def update_tag(
    request: Request,
    tag_id: int,
    body: TagWrite,
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    tags = TagRepo(session)
    tag = await _get_tag(tags, tag_id)
    existing = await tags.get_by_name(body.name)
    if existing is not None and existing.id != tag.id:
        raise Conflict(_DUPLICATE)
    tag.name = body.name
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        raise Conflict(_DUPLICATE) from e
    return success(request, TagOut.model_validate(tag), message="Tag updated successfully")


@router.delete("/{tag_id}", dependencies=[Depends(require_roles(Role.admin))])
async def delete_tag(
    request: Request,
    tag_id: int,
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    tags = TagRepo(session)
    tag = await _get_tag(tags, tag_id)
    # media_tags rows go with the tag via ON DELETE CASCADE.
    try:
        await tags.delete(tag)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        raise PersistenceFailure("Failed to delete tag", cause=e) from e
    return success(request, None, message="Tag deleted successfully")
