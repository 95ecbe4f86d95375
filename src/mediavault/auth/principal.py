"""
mediavault.auth.principal

Resolve a verified token subject to the identity record as it is right now.

Every request re-reads the user row. Role and status come from that row, so a
role downgrade, a suspension or a deleted account takes effect for tokens that
were issued before the change.
"""

from __future__ import annotations

from mediavault.auth.models import Principal
from mediavault.db.models import UserStatus
from mediavault.db.repositories.users import UserRepo
from mediavault.errors import Unauthenticated
from mediavault.observability.logging import get_logger

log = get_logger(__name__)


class PrincipalResolver:
    def __init__(self, users: UserRepo) -> None:
        self._users = users

    async def resolve(self, subject: str) -> Principal:
        try:
            user_id = int(subject)
        except ValueError:
            raise Unauthenticated("Invalid token subject") from None

        user = await self._users.get(user_id)
        if user is None:
            log.info("principal_missing", subject=subject)
            raise Unauthenticated("User no longer exists")
        if user.status != UserStatus.active:
            log.info("principal_inactive", subject=subject, status=user.status.value)
            raise Unauthenticated("User account is not active")

        return Principal.from_user(user)
