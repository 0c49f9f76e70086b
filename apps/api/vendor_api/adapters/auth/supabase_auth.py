"""Supabase session token verifier adapter."""

from __future__ import annotations

import jwt

from vendor_api.adapters.auth.base import AuthVerificationError, TokenVerifier
from vendor_api.schemas.auth import SessionPrincipal

_SESSION_AUDIENCE = "authenticated"
_SESSION_ALGORITHMS = ["HS256"]


class SupabaseTokenVerifier(TokenVerifier):
    """Verifies Supabase access tokens; role from ``app_metadata``, vendor code from ``user_metadata``."""

    def __init__(self, jwt_secret: str | None, audience: str = _SESSION_AUDIENCE) -> None:
        self._jwt_secret = jwt_secret
        self._audience = audience

    def verify_token(self, token: str) -> SessionPrincipal:
        if not self._jwt_secret:
            raise AuthVerificationError("Session verification is not configured")

        try:
            decoded = jwt.decode(
                token,
                self._jwt_secret,
                algorithms=_SESSION_ALGORITHMS,
                audience=self._audience,
                options={"require": ["exp", "sub"]},
            )
        except jwt.InvalidTokenError as exc:
            raise AuthVerificationError("Invalid bearer token") from exc

        user_id = str(decoded.get("sub") or "").strip()
        if not user_id:
            raise AuthVerificationError("Bearer token missing user identity")

        # Users can edit their own user_metadata; the role only comes from app_metadata.
        app_metadata = decoded.get("app_metadata") or {}
        user_metadata = decoded.get("user_metadata") or {}
        return SessionPrincipal(
            user_id=user_id,
            email=decoded.get("email"),
            role=str(app_metadata.get("role") or "vendor"),
            vendor_code=user_metadata.get("vendor_code"),
        )


__all__ = ["SupabaseTokenVerifier"]
