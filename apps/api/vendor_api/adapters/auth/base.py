"""Authentication provider interfaces."""

from abc import ABC, abstractmethod

from vendor_api.schemas.auth import SessionPrincipal


class AuthVerificationError(Exception):
    """Raised when a token cannot be verified or normalized."""


class TokenVerifier(ABC):
    """Provider-neutral session token verification interface."""

    @abstractmethod
    def verify_token(self, token: str) -> SessionPrincipal:
        """Verify token and return normalized principal."""


__all__ = ["AuthVerificationError", "TokenVerifier"]
