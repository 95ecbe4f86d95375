"""
mediavault.auth.models

Auth domain models.

Responsibilities:
- `ClaimSet`: what a verified token says about its bearer.
- `Principal`: the current identity record a request runs as.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from mediavault.db.models import Role, User, UserStatus


@dataclass(frozen=True, slots=True)
class ClaimSet:
    """
    Claims extracted from a verified bearer token.

    Only `subject` is authoritative; `email` and `role` are the values at issue
    time and may be stale.
    """

    subject: str
    email: str | None
    role: str | None
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity, built from the user row read for this request.
    """

    id: int
    email: str
    role: Role | None
    status: UserStatus

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin

    @classmethod
    def from_user(cls, user: User) -> Principal:
        return cls(id=user.id, email=user.email, role=user.role, status=user.status)
