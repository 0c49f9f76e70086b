"""Vendor record service layer."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
import logging

from vendor_api.core.logging_safety import safe_log_identifier
from vendor_api.domain.vendor_identity import VendorIdentity, normalize_vendor_code
from vendor_api.errors import ApiError
from vendor_api.repositories.base import DuplicateKeyError, VendorRecord, VendorStore, VendorStoreError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class VendorNotFoundError(Exception):
    """Raised when a vendor code resolves to zero or several rows."""


@dataclass(frozen=True, slots=True)
class ResolvedVendor:
    vendor_code: str
    vendor_name: str


class VendorRecordUpserter:
    """Ensures exactly one vendor row exists for a normalized code."""

    def __init__(self, store: VendorStore, clock: Callable[[], datetime] = _utcnow) -> None:
        self._store = store
        self._clock = clock

    async def upsert(self, identity: VendorIdentity) -> bool:
        """Create or update the vendor row and return whether it was created.

        A duplicate-key conflict on insert means a concurrent call won the race;
        the winner's row is re-read and handled like any existing vendor. Any
        other store failure raises a 500 ``ApiError`` carrying the store's message.
        """
        safe_code = safe_log_identifier(identity.vendor_code, prefix="vc")
        try:
            existing = await self._store.find_by_code(identity.vendor_code)
            if existing is None:
                if await self._insert(identity, safe_code):
                    return True
                existing = await self._store.find_by_code(identity.vendor_code)

            await self._sync_contact(existing, identity, safe_code)
            return False
        except VendorStoreError as exc:
            logger.error("vendor.store_failed vendor_code=%s error=%s", safe_code, exc)
            raise ApiError(status_code=500, code="VENDOR_STORE_ERROR", message=str(exc)) from exc

    async def _sync_contact(self, existing: VendorRecord | None, identity: VendorIdentity, safe_code: str) -> None:
        stored_email = ((existing.email if existing is not None else None) or "").lower()
        if identity.email and stored_email != identity.email:
            await self._store.update_contact(
                identity.vendor_code,
                email=identity.email,
                vendor_name=identity.vendor_name,
                updated_at=self._clock(),
            )
            logger.info("vendor.updated vendor_code=%s fields=email,vendor_name", safe_code)
        else:
            logger.info("vendor.unchanged vendor_code=%s", safe_code)

    async def _insert(self, identity: VendorIdentity, safe_code: str) -> bool:
        now = self._clock()
        record = VendorRecord(
            vendor_code=identity.vendor_code,
            vendor_name=identity.vendor_name,
            email=identity.email,
            created_at=now,
            updated_at=now,
        )
        try:
            await self._store.insert(record)
        except DuplicateKeyError:
            logger.info("vendor.insert_conflict vendor_code=%s outcome=treated_as_existing", safe_code)
            return False

        logger.info("vendor.created vendor_code=%s", safe_code)
        return True


class VendorLookup:
    def __init__(self, store: VendorStore) -> None:
        self._store = store

    async def find(self, vendor_code: str) -> ResolvedVendor:
        normalized = normalize_vendor_code(vendor_code or "")
        if not normalized:
            raise VendorNotFoundError("Vendor code is empty")

        try:
            record = await self._store.find_by_code(normalized)
        except VendorStoreError as exc:
            raise VendorNotFoundError(str(exc)) from exc
        if record is None:
            raise VendorNotFoundError("Vendor not found")

        return ResolvedVendor(vendor_code=record.vendor_code, vendor_name=record.vendor_name)


__all__ = ["ResolvedVendor", "VendorLookup", "VendorNotFoundError", "VendorRecordUpserter"]
