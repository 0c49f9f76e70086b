"""Recovery link issuance."""

import logging

from vendor_api.adapters.directory import DirectoryError, DirectoryService
from vendor_api.core.logging_safety import safe_log_identifier

logger = logging.getLogger(__name__)


class RecoveryLinkIssuer:
    """Requests a ``recovery`` notification; doubles as invitation for new principals."""

    def __init__(self, directory: DirectoryService) -> None:
        self._directory = directory

    async def issue(self, email: str, redirect_to: str) -> bool:
        safe_email = safe_log_identifier(email, prefix="em")
        try:
            await self._directory.generate_recovery_link(email, redirect_to)
        except DirectoryError as exc:
            logger.warning("recovery.failed email=%s error=%s", safe_email, exc.message)
            return False

        logger.info("recovery.sent email=%s redirect_to=%s", safe_email, redirect_to)
        return True


__all__ = ["RecoveryLinkIssuer"]
