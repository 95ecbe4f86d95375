"""
mediavault.auth.jwt

JWT issuing and verification.

Responsibilities:
- Issue short-lived JWTs (dev router and tests).
- Verify bearer tokens with strict claim requirements (iss/aud/exp/iat/sub) and
  turn them into a `ClaimSet`.

Note:
- HS256 with a shared secret; the algorithm list is pinned on decode.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError

from mediavault.auth.models import ClaimSet
from mediavault.errors import Unauthenticated
from mediavault.observability.logging import get_logger
from mediavault.settings import Settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str

    @classmethod
    def from_settings(cls, settings: Settings) -> JwtConfig:
        return cls(
            alg=settings.jwt_alg,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            secret=settings.jwt_secret,
        )


def issue_token(
    *,
    cfg: JwtConfig,
    subject: str,
    email: str | None = None,
    role: str | None = None,
    ttl: timedelta = timedelta(hours=1),
) -> str:
    now = datetime.now(tz=UTC)
    payload: dict[str, Any] = {
        "iss": cfg.issuer,
        "aud": cfg.audience,
        "sub": subject,
        "email": email,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
    }
    return jwt.encode(payload, cfg.secret, algorithm=cfg.alg)


class TokenVerifier:
    def __init__(self, cfg: JwtConfig) -> None:
        self._cfg = cfg

    def verify(self, token: str | None) -> ClaimSet:
        if not token:
            raise Unauthenticated("Missing bearer token")
        try:
            # Signature, iss, aud and exp (now >= exp is expired) are all checked here.
            payload = jwt.decode(
                token,
                self._cfg.secret,
                algorithms=[self._cfg.alg],
                issuer=self._cfg.issuer,
                audience=self._cfg.audience,
                options={"require": ["exp", "iat", "iss", "aud", "sub"]},
            )
        except InvalidTokenError as e:
            log.info("token_rejected", error=type(e).__name__)
            raise Unauthenticated(f"Invalid token: {e}") from e

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise Unauthenticated("Invalid token subject")

        return ClaimSet(
            subject=subject,
            email=_optional_str(payload.get("email")),
            role=_optional_str(payload.get("role")),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


# --- Module Notes -----------------------------------------------------------
# Token issuing is used by `api/routers/dev_auth.py` and the test suite; there is
# no login or refresh flow in this service.
