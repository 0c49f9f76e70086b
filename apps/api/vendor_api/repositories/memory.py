"""In-memory vendor store used for local development and tests."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from vendor_api.repositories.base import DuplicateKeyError, VendorRecord, VendorStore, VendorStoreError


@dataclass
class InMemoryVendorStore(VendorStore):
    """Simple, deterministic persistence layer for scaffolding and tests.

    ``hide_next_lookup`` makes the next ``find_by_code`` report a miss even when
    the row exists, reproducing the check-then-insert race against a concurrent
    writer. ``failure_message`` makes every call raise ``VendorStoreError``.
    """

    vendors: dict[str, VendorRecord] = field(default_factory=dict)
    insert_count: int = 0
    update_count: int = 0
    lookup_count: int = 0
    hide_next_lookup: bool = False
    failure_message: str | None = None

    def _check_failpoint(self) -> None:
        if self.failure_message is not None:
            raise VendorStoreError(self.failure_message)

    async def find_by_code(self, vendor_code: str) -> VendorRecord | None:
        self._check_failpoint()
        self.lookup_count += 1
        if self.hide_next_lookup:
            self.hide_next_lookup = False
            return None
        record = self.vendors.get(vendor_code)
        return replace(record) if record is not None else None

    async def insert(self, record: VendorRecord) -> None:
        self._check_failpoint()
        if record.vendor_code in self.vendors:
            raise DuplicateKeyError('duplicate key value violates unique constraint "vendors_vendor_code_key"')
        self.vendors[record.vendor_code] = replace(record)
        self.insert_count += 1

    async def update_contact(
        self,
        vendor_code: str,
        *,
        email: str,
        vendor_name: str,
        updated_at: datetime,
    ) -> None:
        self._check_failpoint()
        record = self.vendors.get(vendor_code)
        if record is None:
            return
        record.email = email
        record.vendor_name = vendor_name
        record.updated_at = updated_at
        self.update_count += 1
