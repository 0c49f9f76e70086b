"""In-memory directory service for local development and tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from uuid import uuid4

from vendor_api.adapters.directory.base import (
    DirectoryError,
    DirectoryPrincipal,
    DirectoryService,
    PrincipalAlreadyExistsError,
    PrincipalNotFoundError,
)


@dataclass(slots=True)
class RecoveryRequest:
    email: str
    redirect_to: str


@dataclass
class InMemoryDirectory(DirectoryService):
    """Deterministic directory double.

    Failpoints:
    - ``lookup_unreliable``: ``get_principal_by_email`` always reports a miss.
    - ``create_failure_message``: ``create_principal`` raises ``DirectoryError``.
    - ``recovery_failure_message``: ``generate_recovery_link`` raises ``DirectoryError``.
    """

    principals: dict[str, DirectoryPrincipal] = field(default_factory=dict)
    confirmed_emails: set[str] = field(default_factory=set)
    recovery_requests: list[RecoveryRequest] = field(default_factory=list)
    create_count: int = 0
    lookup_unreliable: bool = False
    create_failure_message: str | None = None
    recovery_failure_message: str | None = None

    async def get_principal_by_email(self, email: str) -> DirectoryPrincipal:
        principal = None if self.lookup_unreliable else self.principals.get(email)
        if principal is None:
            raise PrincipalNotFoundError("User not found")
        return replace(principal, metadata=dict(principal.metadata))

    async def create_principal(
        self,
        email: str,
        metadata: dict[str, str],
        *,
        confirmed: bool,
    ) -> DirectoryPrincipal:
        if self.create_failure_message is not None:
            raise DirectoryError(self.create_failure_message)
        if email in self.principals:
            raise PrincipalAlreadyExistsError("A user with this email address has already been registered")

        principal = DirectoryPrincipal(principal_id=str(uuid4()), email=email, metadata=dict(metadata))
        self.principals[email] = principal
        if confirmed:
            self.confirmed_emails.add(email)
        self.create_count += 1
        return replace(principal, metadata=dict(metadata))

    async def generate_recovery_link(self, email: str, redirect_to: str) -> None:
        if self.recovery_failure_message is not None:
            raise DirectoryError(self.recovery_failure_message)
        self.recovery_requests.append(RecoveryRequest(email=email, redirect_to=redirect_to))


__all__ = ["InMemoryDirectory", "RecoveryRequest"]
