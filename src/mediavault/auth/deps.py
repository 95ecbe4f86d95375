"""
mediavault.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a `Principal` (verify -> fresh lookup).
- Enforce role requirements via a reusable dependency factory.
"""

from __future__ import annotations

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from mediavault.api.deps import db_session, settings_dep
from mediavault.auth.access import RoleRequirement, enforce
from mediavault.auth.jwt import JwtConfig, TokenVerifier
from mediavault.auth.models import Principal
from mediavault.auth.principal import PrincipalResolver
from mediavault.db.models import Role
from mediavault.db.repositories.users import UserRepo
from mediavault.errors import Forbidden
from mediavault.observability.logging import get_logger
from mediavault.settings import Settings

log = get_logger(__name__)

_bearer = HTTPBearer(auto_error=False)


async def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
) -> Principal:
    # Authn: a missing token is Unauthenticated, never Forbidden.
    token = creds.credentials if creds is not None else None
    claims = TokenVerifier(JwtConfig.from_settings(settings)).verify(token)

    # Only the subject is taken from the token; role/status come from the user row.
    principal = await PrincipalResolver(UserRepo(session)).resolve(claims.subject)
    structlog.contextvars.bind_contextvars(principal_id=principal.id)
    return principal


def require_roles(*required: Role):
    requirement: RoleRequirement = frozenset(required)

    async def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        try:
            enforce(principal, requirement)
        except Forbidden as e:
            log.info(
                "access_denied",
                reason=e.reason,
                required=sorted(r.value for r in requirement),
            )
            raise
        return principal

    return _dep


# --- Module Notes -----------------------------------------------------------
# Routes declare their requirement as `Depends(require_roles(Role.admin))`; routes
# that only need authentication depend on `get_principal` directly.
