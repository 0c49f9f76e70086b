"""Supabase Auth (GoTrue) admin adapter."""

from __future__ import annotations

from typing import Any

import httpx

from vendor_api.adapters.directory.base import (
    DirectoryError,
    DirectoryPrincipal,
    DirectoryService,
    PrincipalAlreadyExistsError,
    PrincipalNotFoundError,
)


_ALREADY_EXISTS_CODES = frozenset({"email_exists", "user_already_exists"})
_ALREADY_EXISTS_MARKERS = ("already been registered", "already registered", "already exists")
_LOOKUP_PAGE_SIZE = 50


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {}


def _error_message(response: httpx.Response) -> str:
    body = _error_body(response)
    for key in ("msg", "message", "error_description", "error"):
        value = body.get(key)
        if value:
            return str(value)
    return f"Directory service returned HTTP {response.status_code}"


def _is_already_exists(response: httpx.Response) -> bool:
    if response.status_code not in (400, 409, 422):
        return False
    body = _error_body(response)
    if body.get("error_code") in _ALREADY_EXISTS_CODES:
        return True
    message = _error_message(response).lower()
    return any(marker in message for marker in _ALREADY_EXISTS_MARKERS)


def _to_principal(user: dict[str, Any]) -> DirectoryPrincipal:
    metadata = user.get("user_metadata") or {}
    return DirectoryPrincipal(
        principal_id=str(user["id"]),
        email=str(user.get("email") or "").lower(),
        metadata={str(k): str(v) for k, v in metadata.items() if v is not None},
    )


class SupabaseDirectory(DirectoryService):
    """Calls the ``/auth/v1`` admin endpoints with the service-role key."""

    def __init__(self, client: httpx.AsyncClient, base_url: str, service_role_key: str) -> None:
        self._client = client
        self._auth_url = f"{base_url.rstrip('/')}/auth/v1"
        self._headers = {
            "apikey": service_role_key,
            "Authorization": f"Bearer {service_role_key}",
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, f"{self._auth_url}{path}", headers=self._headers, **kwargs)
        except httpx.HTTPError as exc:
            raise DirectoryError(f"Directory service request failed: {exc}") from exc

    async def get_principal_by_email(self, email: str) -> DirectoryPrincipal:
        # The server-side filter is a substring match; page through it and match exactly here.
        page = 1
        while True:
            response = await self._request(
                "GET",
                "/admin/users",
                params={"filter": email, "page": page, "per_page": _LOOKUP_PAGE_SIZE},
            )
            if not response.is_success:
                raise DirectoryError(_error_message(response))

            users = response.json().get("users") or []
            for user in users:
                if str(user.get("email") or "").lower() == email:
                    return _to_principal(user)
            if len(users) < _LOOKUP_PAGE_SIZE:
                raise PrincipalNotFoundError("User not found")
            page += 1

    async def create_principal(
        self,
        email: str,
        metadata: dict[str, str],
        *,
        confirmed: bool,
    ) -> DirectoryPrincipal:
        response = await self._request(
            "POST",
            "/admin/users",
            json={"email": email, "email_confirm": confirmed, "user_metadata": metadata},
        )
        if _is_already_exists(response):
            raise PrincipalAlreadyExistsError(_error_message(response))
        if not response.is_success:
            raise DirectoryError(_error_message(response))

        body = response.json()
        # Older GoTrue releases wrap the created user in a ``user`` key.
        return _to_principal(body.get("user") or body)

    async def generate_recovery_link(self, email: str, redirect_to: str) -> None:
        response = await self._request(
            "POST",
            "/recover",
            params={"redirect_to": redirect_to},
            json={"email": email},
        )
        if not response.is_success:
            raise DirectoryError(_error_message(response))


__all__ = ["SupabaseDirectory"]
