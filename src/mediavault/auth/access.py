"""
mediavault.auth.access

Role-based access decision.

Responsibilities:
- Decide allow/deny for a principal against a route's role requirement (pure, no I/O).
- Turn a denial into `Forbidden` carrying the reason.
"""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass

from mediavault.auth.models import Principal
from mediavault.db.models import Role
from mediavault.errors import Forbidden

RoleRequirement = frozenset[Role]

REASON_NOT_AUTHENTICATED = "not authenticated"
REASON_NO_ROLE = "no role"


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: str | None = None


ALLOW = Decision(allowed=True)


def decide(principal: Principal | None, requirement: Collection[Role] | None) -> Decision:
    """
    Rules, first match wins:
    1. no requirement -> allow
    2. no principal -> deny "not authenticated"
    3. principal without a role -> deny "no role"
    4. role in requirement -> allow
    5. otherwise -> deny "role <role> lacks permission"
    """

    if not requirement:
        return ALLOW
    if principal is None:
        return Decision(allowed=False, reason=REASON_NOT_AUTHENTICATED)
    if principal.role is None:
        return Decision(allowed=False, reason=REASON_NO_ROLE)
    if principal.role in requirement:
        return ALLOW
    return Decision(allowed=False, reason=f"role {principal.role.value} lacks permission")


def enforce(principal: Principal | None, requirement: Collection[Role] | None) -> None:
    decision = decide(principal, requirement)
    if not decision.allowed:
        raise Forbidden(decision.reason or "forbidden")
