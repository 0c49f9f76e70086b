"""Vendor store backed by the Supabase PostgREST endpoint."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx

from vendor_api.repositories.base import (
    AmbiguousVendorError,
    DuplicateKeyError,
    VendorRecord,
    VendorStore,
    VendorStoreError,
)


_UNIQUE_VIOLATION = "23505"
_SELECT_COLUMNS = "vendor_code,vendor_name,email,created_at,updated_at"


def _parse_timestamp(value: Any) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def _error_payload(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {"message": response.text}
    return payload if isinstance(payload, dict) else {"message": str(payload)}


class SupabaseVendorStore(VendorStore):
    """Calls ``/rest/v1/<table>`` with the service-role key."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, service_role_key: str, table: str = "vendors") -> None:
        self._client = client
        self._url = f"{base_url.rstrip('/')}/rest/v1/{table}"
        self._headers = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
        }

    async def _request(self, method: str, **kwargs: Any) -> httpx.Response:
        headers = {**self._headers, **kwargs.pop("headers", {})}
        try:
            return await self._client.request(method, self._url, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            raise VendorStoreError(f"Record store request failed: {exc}") from exc

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        if response.is_success:
            return
        payload = _error_payload(response)
        message = str(payload.get("message") or f"Record store returned HTTP {response.status_code}")
        if payload.get("code") == _UNIQUE_VIOLATION:
            raise DuplicateKeyError(message)
        raise VendorStoreError(message)

    async def find_by_code(self, vendor_code: str) -> VendorRecord | None:
        response = await self._request(
            "GET",
            params={"vendor_code": f"eq.{vendor_code}", "select": _SELECT_COLUMNS},
        )
        self._raise_for_error(response)

        rows = response.json()
        if not rows:
            return None
        if len(rows) > 1:
            raise AmbiguousVendorError(f"{len(rows)} vendor rows share one code")

        row = rows[0]
        return VendorRecord(
            vendor_code=row["vendor_code"],
            vendor_name=row.get("vendor_name") or "",
            email=row.get("email"),
            created_at=_parse_timestamp(row.get("created_at")),
            updated_at=_parse_timestamp(row.get("updated_at")),
        )

    async def insert(self, record: VendorRecord) -> None:
        row = {
            "vendor_code": record.vendor_code,
            "vendor_name": record.vendor_name,
            "email": record.email,
            "created_at": record.created_at.isoformat() if record.created_at else None,
            "updated_at": record.updated_at.isoformat() if record.updated_at else None,
        }
        response = await self._request("POST", json=[row], headers={"Prefer": "return=minimal"})
        self._raise_for_error(response)

    async def update_contact(
        self,
        vendor_code: str,
        *,
        email: str,
        vendor_name: str,
        updated_at: datetime,
    ) -> None:
        response = await self._request(
            "PATCH",
            params={"vendor_code": f"eq.{vendor_code}"},
            json={"email": email, "vendor_name": vendor_name, "updated_at": updated_at.isoformat()},
            headers={"Prefer": "return=minimal"},
        )
        self._raise_for_error(response)
