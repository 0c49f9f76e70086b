"""Vendor provisioning orchestration."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from vendor_api.core.logging_safety import safe_log_identifier
from vendor_api.domain.vendor_identity import VendorIdentity, normalize_identity
from vendor_api.services.principals import PrincipalResolutionError, PrincipalResolver
from vendor_api.services.recovery import RecoveryLinkIssuer
from vendor_api.services.vendor_records import VendorRecordUpserter

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProvisioningResult:
    identity: VendorIdentity
    is_new_vendor: bool = False
    auth_created: bool = False
    email_sent: bool = False
    user_id: str | None = None
    error: str | None = None

    @property
    def message(self) -> str:
        if self.error is not None:
            return self.error
        if not self.email_sent:
            return "Auth ready but email failed - check email configuration"
        if self.auth_created:
            return f"Invitation email sent to {self.identity.email}"
        return f"Password reset email sent to {self.identity.email}"


class ProvisioningOrchestrator:
    """Runs vendor record → principal → recovery link, in that order.

    Only vendor-store failures abort the flow. Once the vendor row is written,
    principal and recovery-link failures degrade the result instead of raising.
    """

    def __init__(
        self,
        upserter: VendorRecordUpserter,
        resolver: PrincipalResolver,
        recovery: RecoveryLinkIssuer,
    ) -> None:
        self._upserter = upserter
        self._resolver = resolver
        self._recovery = recovery

    async def provision(
        self,
        *,
        vendor_code: str | None,
        vendor_name: str | None,
        email: str | None,
        redirect_to: str,
    ) -> ProvisioningResult:
        identity = normalize_identity(vendor_code, vendor_name, email)
        safe_code = safe_log_identifier(identity.vendor_code, prefix="vc")
        logger.info("provisioning.started vendor_code=%s", safe_code)

        result = ProvisioningResult(identity=identity)
        result.is_new_vendor = await self._upserter.upsert(identity)

        try:
            resolution = await self._resolver.resolve(identity)
        except PrincipalResolutionError as exc:
            result.error = f"Vendor saved but auth setup failed: {exc.message}"
            logger.warning(
                "provisioning.degraded vendor_code=%s is_new_vendor=%s stage=principal",
                safe_code,
                result.is_new_vendor,
            )
            return result

        result.auth_created = resolution.auth_created
        result.user_id = resolution.principal_id
        result.email_sent = await self._recovery.issue(identity.email, redirect_to)

        logger.info(
            "provisioning.completed vendor_code=%s is_new_vendor=%s auth_created=%s email_sent=%s",
            safe_code,
            result.is_new_vendor,
            result.auth_created,
            result.email_sent,
        )
        return result


__all__ = ["ProvisioningOrchestrator", "ProvisioningResult"]
