"""Directory principal resolution."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from vendor_api.adapters.directory import (
    DirectoryError,
    DirectoryService,
    PrincipalAlreadyExistsError,
    PrincipalNotFoundError,
)
from vendor_api.core.logging_safety import safe_log_identifier
from vendor_api.domain.vendor_identity import VendorIdentity

logger = logging.getLogger(__name__)


class PrincipalResolutionError(Exception):
    """Raised when a principal can neither be found nor created."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class PrincipalResolution:
    exists: bool
    auth_created: bool
    principal_id: str | None


class PrincipalResolver:
    """Finds or creates the single directory principal for a vendor email."""

    def __init__(self, directory: DirectoryService) -> None:
        self._directory = directory

    async def resolve(self, identity: VendorIdentity) -> PrincipalResolution:
        safe_email = safe_log_identifier(identity.email, prefix="em")

        try:
            found = await self._directory.get_principal_by_email(identity.email)
        except PrincipalNotFoundError:
            found = None
        except DirectoryError as exc:
            logger.error("principal.lookup_failed email=%s error=%s", safe_email, exc.message)
            raise PrincipalResolutionError(exc.message) from exc

        if found is not None:
            logger.info("principal.reused email=%s principal_id=%s", safe_email, found.principal_id)
            return PrincipalResolution(exists=True, auth_created=False, principal_id=found.principal_id)

        try:
            created = await self._directory.create_principal(
                identity.email,
                identity.principal_metadata(),
                confirmed=True,
            )
        except PrincipalAlreadyExistsError:
            # Lost the check-then-create race, or the lookup missed an existing principal.
            logger.info("principal.create_conflict email=%s outcome=treated_as_existing", safe_email)
            return PrincipalResolution(exists=True, auth_created=False, principal_id=await self._refetch_id(identity.email))
        except DirectoryError as exc:
            logger.error("principal.create_failed email=%s error=%s", safe_email, exc.message)
            raise PrincipalResolutionError(exc.message) from exc

        logger.info("principal.created email=%s principal_id=%s", safe_email, created.principal_id)
        return PrincipalResolution(exists=False, auth_created=True, principal_id=created.principal_id)

    async def _refetch_id(self, email: str) -> str | None:
        try:
            principal = await self._directory.get_principal_by_email(email)
        except DirectoryError:
            return None
        return principal.principal_id


__all__ = ["PrincipalResolution", "PrincipalResolutionError", "PrincipalResolver"]
