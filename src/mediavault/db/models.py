"""
mediavault.db.models

Persistence schema.

Responsibilities:
- Define ORM models:
  - User: identity record read by the auth gate
  - Tag: flat labels attached to media
  - Media: metadata for a stored upload, owned by a user
- Declare relations as `lazy="raise"` so every load is an explicit repository call.
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime

from sqlalchemy import BigInteger, Column, Enum, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mediavault.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC timestamps.
    return datetime.now(UTC).replace(tzinfo=None)


class Role(enum.StrEnum):
    user = "user"
    admin = "admin"


class UserStatus(enum.StrEnum):
    active = "active"
    inactive = "inactive"


class MediaCategory(enum.StrEnum):
    # Values are the API representation; the column stores member names.
    image = "IMAGE"
    video = "VIDEO"
    pdf = "PDF"


media_tags = Table(
    "media_tags",
    Base.metadata,
    Column("media_id", ForeignKey("media.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # NULL is a user without a role; access checks deny it. The `user` default lives on
    # the inputs (`UserRepo.create`, the dev router), not on the column.
    role: Mapped[Role | None] = mapped_column(Enum(Role), nullable=True)
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus), nullable=False, default=UserStatus.active
    )

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    media: Mapped[list[Media]] = relationship(
        back_populates="owner", lazy="raise", passive_deletes=True
    )


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class Media(Base):
    __tablename__ = "media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Relative to the configured storage root, e.g. "images/1712-9f2c.png".
    storage_path: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[MediaCategory] = mapped_column(Enum(MediaCategory), nullable=False)
    extension: Mapped[str] = mapped_column(String(16), nullable=False)
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    view_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    owner: Mapped[User] = relationship(back_populates="media", lazy="raise")
    tags: Mapped[list[Tag]] = relationship(secondary=media_tags, lazy="raise")

    @property
    def tag_ids(self) -> list[int]:
        return sorted(t.id for t in self.tags)
