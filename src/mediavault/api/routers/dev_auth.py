from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED, HTTP_404_NOT_FOUND

from mediavault.api.deps import db_session, settings_dep
from mediavault.api.envelope import success
from mediavault.api.schemas import UserOut
from mediavault.auth.jwt import JwtConfig, issue_token
from mediavault.db.models import Role, UserStatus
from mediavault.db.repositories.users import UserRepo
from mediavault.errors import Conflict, NotFound
from mediavault.settings import Settings


def _dev_only(settings: Settings = Depends(settings_dep)) -> None:
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")


router = APIRouter(prefix="/dev", tags=["dev"], dependencies=[Depends(_dev_only)])


class DevUserRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    name: str | None = Field(default=None, max_length=255)
    role: Role | None = Role.user
    status: UserStatus = UserStatus.active


class DevTokenRequest(BaseModel):
    user_id: int
    ttl_minutes: int | None = Field(default=None, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/users")
async def create_dev_user(
    request: Request,
    body: DevUserRequest,
    session: AsyncSession = Depends(db_session),
) -> JSONResponse:
    users = UserRepo(session)
    if await users.get_by_email(body.email) is not None:
        raise Conflict("User with this email already exists")
    user = await users.create(email=body.email, name=body.name, role=body.role, status=body.status)
    await session.commit()
    return success(
        request,
        UserOut.model_validate(user),
        message="User created successfully",
        status_code=HTTP_201_CREATED,
    )


@router.post("/token")
async def mint_dev_token(
    request: Request,
    body: DevTokenRequest,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JSONResponse:
    user = await UserRepo(session).get(body.user_id)
    if user is None:
        raise NotFound("User", body.user_id)

    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=str(user.id),
        email=user.email,
        role=user.role.value if user.role is not None else None,
        ttl=timedelta(minutes=body.ttl_minutes or settings.jwt_ttl_minutes),
    )
    return success(request, DevTokenResponse(access_token=token), message="Token issued")
