"""
tests.test_access

Role decision rules and their enforcement.
"""

from __future__ import annotations

import pytest

from mediavault.auth.access import (
    REASON_NO_ROLE,
    REASON_NOT_AUTHENTICATED,
    Decision,
    decide,
    enforce,
)
from mediavault.auth.models import Principal
from mediavault.db.models import Role, UserStatus
from mediavault.errors import Forbidden


def _principal(role: Role | None) -> Principal:
    return Principal(id=1, email="p@example.com", role=role, status=UserStatus.active)


ADMIN_ONLY = frozenset({Role.admin})


@pytest.mark.parametrize(
    ("principal", "requirement", "expected"),
    [
        (None, None, Decision(allowed=True)),
        (None, frozenset(), Decision(allowed=True)),
        (_principal(None), frozenset(), Decision(allowed=True)),
        (None, ADMIN_ONLY, Decision(allowed=False, reason=REASON_NOT_AUTHENTICATED)),
        (_principal(None), ADMIN_ONLY, Decision(allowed=False, reason=REASON_NO_ROLE)),
        (_principal(Role.admin), ADMIN_ONLY, Decision(allowed=True)),
        (_principal(Role.user), frozenset({Role.user, Role.admin}), Decision(allowed=True)),
        (
            _principal(Role.user),
            ADMIN_ONLY,
            Decision(allowed=False, reason="role user lacks permission"),
        ),
    ],
)
def test_decide_rules(principal, requirement, expected) -> None:
    assert decide(principal, requirement) == expected


def test_decide_is_repeatable() -> None:
    principal = _principal(Role.user)
    first = decide(principal, ADMIN_ONLY)
    assert all(decide(principal, ADMIN_ONLY) == first for _ in range(5))


def test_user_denied_admin_requirement() -> None:
    with pytest.raises(Forbidden) as exc:
        enforce(_principal(Role.user), ADMIN_ONLY)
    assert exc.value.reason == "role user lacks permission"
    assert exc.value.status_code == 403


def test_enforce_allows_without_raising() -> None:
    enforce(_principal(Role.admin), ADMIN_ONLY)
    enforce(None, None)
