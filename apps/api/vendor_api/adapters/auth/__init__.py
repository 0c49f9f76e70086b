"""Auth verifier adapters."""

from .base import AuthVerificationError, TokenVerifier
from .mock_auth import MockTokenVerifier
from .supabase_auth import SupabaseTokenVerifier

__all__ = [
    "AuthVerificationError",
    "TokenVerifier",
    "MockTokenVerifier",
    "SupabaseTokenVerifier",
]
