"""Signed vendor claim tokens."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from vendor_api.errors import configuration_error

CLAIM_TOKEN_ALGORITHM = "HS256"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ClaimTokenIssuer:
    """Mints HS256 tokens carrying a single ``vendor_code`` claim.

    The token is independent of the platform session and is never stored;
    consumers verify it with the same secret and issuer.
    """

    def __init__(
        self,
        secret: str | None,
        *,
        issuer: str = "JulineMart",
        ttl: timedelta = timedelta(hours=12),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._secret = secret
        self._issuer = issuer
        self._ttl = ttl
        self._clock = clock

    def _require_secret(self) -> str:
        if not self._secret:
            raise configuration_error("Claim token signing secret is not configured")
        return self._secret

    def issue(self, vendor_code: str) -> str:
        secret = self._require_secret()
        issued_at = self._clock().replace(microsecond=0)
        claims = {
            "vendor_code": vendor_code,
            "iss": self._issuer,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(claims, secret, algorithm=CLAIM_TOKEN_ALGORITHM)

    def decode(self, token: str) -> dict[str, Any]:
        """Verify signature, issuer and expiry; raise ``jwt.InvalidTokenError`` otherwise."""
        return jwt.decode(
            token,
            self._require_secret(),
            algorithms=[CLAIM_TOKEN_ALGORITHM],
            issuer=self._issuer,
            options={"require": ["exp", "iat", "iss", "vendor_code"]},
        )


__all__ = ["CLAIM_TOKEN_ALGORITHM", "ClaimTokenIssuer"]
