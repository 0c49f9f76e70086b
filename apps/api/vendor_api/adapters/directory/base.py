"""Directory service (identity provider admin) interfaces."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


class DirectoryError(Exception):
    """Raised when the directory service rejects or fails a request."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PrincipalNotFoundError(DirectoryError):
    """Raised when no principal is registered for an email."""


class PrincipalAlreadyExistsError(DirectoryError):
    """Raised when creating a principal for an email that is already registered."""


@dataclass(slots=True)
class DirectoryPrincipal:
    principal_id: str
    email: str
    metadata: dict[str, str] = field(default_factory=dict)


class DirectoryService(ABC):
    """Provider-neutral admin interface over the identity provider.

    Implementations classify provider failures into ``PrincipalNotFoundError``,
    ``PrincipalAlreadyExistsError`` or plain ``DirectoryError`` so callers never
    inspect provider error text.
    """

    @abstractmethod
    async def get_principal_by_email(self, email: str) -> DirectoryPrincipal:
        """Return the principal registered for a normalized email."""

    @abstractmethod
    async def create_principal(
        self,
        email: str,
        metadata: dict[str, str],
        *,
        confirmed: bool,
    ) -> DirectoryPrincipal:
        """Create a principal; ``confirmed`` skips the provider's confirmation email."""

    @abstractmethod
    async def generate_recovery_link(self, email: str, redirect_to: str) -> None:
        """Send a password recovery notification that lands on ``redirect_to``."""


__all__ = [
    "DirectoryError",
    "DirectoryPrincipal",
    "DirectoryService",
    "PrincipalAlreadyExistsError",
    "PrincipalNotFoundError",
]
