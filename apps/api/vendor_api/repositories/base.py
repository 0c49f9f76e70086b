"""Vendor record store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


class VendorStoreError(Exception):
    """Raised when the record store fails for a reason other than a key conflict."""


class DuplicateKeyError(VendorStoreError):
    """Raised when an insert collides with an existing ``vendor_code``."""


class AmbiguousVendorError(VendorStoreError):
    """Raised when a lookup by ``vendor_code`` matches more than one row."""


@dataclass(slots=True)
class VendorRecord:
    vendor_code: str
    vendor_name: str
    email: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VendorStore(ABC):
    """Single-table store keyed by the normalized ``vendor_code``."""

    @abstractmethod
    async def find_by_code(self, vendor_code: str) -> VendorRecord | None:
        """Return the row for an exact code match, or ``None``."""

    @abstractmethod
    async def insert(self, record: VendorRecord) -> None:
        """Insert a new row; raise ``DuplicateKeyError`` if the code is taken."""

    @abstractmethod
    async def update_contact(
        self,
        vendor_code: str,
        *,
        email: str,
        vendor_name: str,
        updated_at: datetime,
    ) -> None:
        """Update the mutable contact fields of an existing row."""


__all__ = [
    "AmbiguousVendorError",
    "DuplicateKeyError",
    "VendorRecord",
    "VendorStore",
    "VendorStoreError",
]
