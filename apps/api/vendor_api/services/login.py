"""Vendor-code login with claim tokens."""

from __future__ import annotations

import logging

from vendor_api.core.logging_safety import safe_log_identifier
from vendor_api.errors import unauthorized
from vendor_api.schemas.auth import VendorLoginResponse
from vendor_api.services.claim_tokens import ClaimTokenIssuer
from vendor_api.services.vendor_records import VendorLookup, VendorNotFoundError

logger = logging.getLogger(__name__)


class LoginOrchestrator:
    """Resolves a vendor code and returns a signed claim token.

    The password is accepted but not verified against any credential store;
    whether it should be is an open product decision.
    """

    def __init__(self, lookup: VendorLookup, issuer: ClaimTokenIssuer) -> None:
        self._lookup = lookup
        self._issuer = issuer

    async def login(self, *, vendor_code: str, password: str | None = None) -> VendorLoginResponse:
        safe_code = safe_log_identifier(vendor_code, prefix="vc")
        try:
            vendor = await self._lookup.find(vendor_code)
        except VendorNotFoundError as exc:
            logger.warning("login.rejected vendor_code=%s reason=%s", safe_code, exc)
            raise unauthorized("Invalid vendor") from exc

        token = self._issuer.issue(vendor.vendor_code)
        logger.info("login.accepted vendor_code=%s", safe_code)
        return VendorLoginResponse(vendor_name=vendor.vendor_name, vendor_code=vendor.vendor_code, token=token)


__all__ = ["LoginOrchestrator"]
