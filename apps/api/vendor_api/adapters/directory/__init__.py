"""Directory service adapters."""

from .base import (
    DirectoryError,
    DirectoryPrincipal,
    DirectoryService,
    PrincipalAlreadyExistsError,
    PrincipalNotFoundError,
)
from .mock_directory import InMemoryDirectory
from .supabase_directory import SupabaseDirectory

__all__ = [
    "DirectoryError",
    "DirectoryPrincipal",
    "DirectoryService",
    "InMemoryDirectory",
    "PrincipalAlreadyExistsError",
    "PrincipalNotFoundError",
    "SupabaseDirectory",
]
