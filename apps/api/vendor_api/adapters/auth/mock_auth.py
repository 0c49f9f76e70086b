"""Mock auth verifier for local development and tests."""

from vendor_api.adapters.auth.base import AuthVerificationError, TokenVerifier
from vendor_api.schemas.auth import SessionPrincipal


class MockTokenVerifier(TokenVerifier):
    """Accepts deterministic test tokens only.

    Expected token format:
    - ``test:<user_id>``
    - ``test:<user_id>:<role>``
    - ``test:<user_id>:<role>:<vendor_code>``
    """

    def verify_token(self, token: str) -> SessionPrincipal:
        parts = token.split(":")
        if len(parts) not in (2, 3, 4) or parts[0] != "test":
            raise AuthVerificationError("Invalid bearer token")

        user_id = parts[1].strip()
        role = parts[2].strip() if len(parts) >= 3 else "vendor"
        vendor_code = parts[3].strip().upper() if len(parts) == 4 else None

        if not user_id:
            raise AuthVerificationError("Bearer token missing user identity")
        if not role:
            raise AuthVerificationError("Bearer token missing role")

        return SessionPrincipal(user_id=user_id, role=role, vendor_code=vendor_code or None)


__all__ = ["MockTokenVerifier"]
