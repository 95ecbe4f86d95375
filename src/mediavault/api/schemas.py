"""
mediavault.api.schemas

Request/response models for the HTTP layer.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from mediavault.db.models import MediaCategory, Role, UserStatus


class TagOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime
    updated_at: datetime


class TagWrite(BaseModel):
    name: str = Field(min_length=1, max_length=50)


class MediaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    storage_path: str
    display_name: str
    category: MediaCategory
    extension: str
    size_bytes: int
    view_count: int
    tag_ids: list[int]
    tags: list[TagOut]
    created_at: datetime
    updated_at: datetime


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    role: Role | None
    status: UserStatus
