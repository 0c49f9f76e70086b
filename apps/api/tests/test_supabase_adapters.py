"""Supabase adapter tests against a mocked HTTP transport."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import json
import unittest

import httpx
import jwt

from vendor_api.adapters.auth import AuthVerificationError, MockTokenVerifier, SupabaseTokenVerifier
from vendor_api.adapters.directory import (
    DirectoryError,
    PrincipalAlreadyExistsError,
    PrincipalNotFoundError,
    SupabaseDirectory,
)
from vendor_api.core.config import Settings
from vendor_api.repositories.base import AmbiguousVendorError, DuplicateKeyError, VendorRecord, VendorStoreError
from vendor_api.repositories.supabase import SupabaseVendorStore
from vendor_api.routes.dependencies import get_token_verifier

_BASE_URL = "https://project.supabase.test"
_SERVICE_KEY = "service-role-key"
_JWT_SECRET = "test-session-secret-0123456789abcdef"


class _RecordingTransport:
    """Replays canned responses and keeps the requests it saw."""

    def __init__(self, *responses: httpx.Response) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responses.pop(0)


def _client(transport: _RecordingTransport) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(transport))


class SupabaseDirectoryTests(unittest.IsolatedAsyncioTestCase):
    async def test_lookup_filters_by_email_and_matches_exactly(self) -> None:
        transport = _RecordingTransport(
            httpx.Response(
                200,
                json={
                    "users": [
                        {"id": "u-1", "email": "owner@acme.com.au"},
                        {"id": "u-2", "email": "Owner@Acme.com", "user_metadata": {"vendor_code": "ABC"}},
                    ]
                },
            )
        )
        async with _client(transport) as client:
            principal = await SupabaseDirectory(client, _BASE_URL, _SERVICE_KEY).get_principal_by_email("owner@acme.com")

        self.assertEqual(principal.principal_id, "u-2")
        self.assertEqual(principal.metadata, {"vendor_code": "ABC"})
        request = transport.requests[0]
        self.assertEqual(request.url.path, "/auth/v1/admin/users")
        self.assertEqual(request.url.params["filter"], "owner@acme.com")
        self.assertEqual(request.headers["apikey"], _SERVICE_KEY)
        self.assertEqual(request.headers["Authorization"], f"Bearer {_SERVICE_KEY}")

    async def test_lookup_without_exact_match_is_not_found(self) -> None:
        transport = _RecordingTransport(httpx.Response(200, json={"users": [{"id": "u-1", "email": "x@acme.com"}]}))
        async with _client(transport) as client:
            directory = SupabaseDirectory(client, _BASE_URL, _SERVICE_KEY)
            with self.assertRaises(PrincipalNotFoundError):
                await directory.get_principal_by_email("owner@acme.com")

    async def test_lookup_pages_until_exact_match_or_short_page(self) -> None:
        near_misses = [{"id": f"u-{n}", "email": f"owner@acme.com.x{n}"} for n in range(50)]
        transport = _RecordingTransport(
            httpx.Response(200, json={"users": near_misses}),
            httpx.Response(200, json={"users": [{"id": "u-exact", "email": "owner@acme.com"}]}),
            httpx.Response(200, json={"users": near_misses}),
            httpx.Response(200, json={"users": []}),
        )
        async with _client(transport) as client:
            directory = SupabaseDirectory(client, _BASE_URL, _SERVICE_KEY)
            principal = await directory.get_principal_by_email("owner@acme.com")
            with self.assertRaises(PrincipalNotFoundError):
                await directory.get_principal_by_email("owner@acme.com")

        self.assertEqual(principal.principal_id, "u-exact")
        self.assertEqual([request.url.params["page"] for request in transport.requests], ["1", "2", "1", "2"])

    async def test_create_sends_confirmed_principal_with_metadata(self) -> None:
        transport = _RecordingTransport(httpx.Response(200, json={"id": "u-9", "email": "owner@acme.com"}))
        metadata = {"role": "vendor", "vendor_code": "ABC", "vendor_name": "Acme Co"}
        async with _client(transport) as client:
            principal = await SupabaseDirectory(client, _BASE_URL, _SERVICE_KEY).create_principal(
                "owner@acme.com",
                metadata,
                confirmed=True,
            )

        self.assertEqual(principal.principal_id, "u-9")
        body = json.loads(transport.requests[0].content)
        self.assertEqual(body, {"email": "owner@acme.com", "email_confirm": True, "user_metadata": metadata})

    async def test_create_conflict_is_classified_as_already_exists(self) -> None:
        responses = [
            httpx.Response(422, json={"error_code": "email_exists", "msg": "Email address already exists"}),
            httpx.Response(400, json={"msg": "A user with this email address has already been registered"}),
        ]
        for response in responses:
            with self.subTest(status=response.status_code):
                async with _client(_RecordingTransport(response)) as client:
                    directory = SupabaseDirectory(client, _BASE_URL, _SERVICE_KEY)
                    with self.assertRaises(PrincipalAlreadyExistsError):
                        await directory.create_principal("owner@acme.com", {}, confirmed=True)

    async def test_other_create_failures_keep_directory_message(self) -> None:
        transport = _RecordingTransport(httpx.Response(500, json={"msg": "Database error saving new user"}))
        async with _client(transport) as client:
            directory = SupabaseDirectory(client, _BASE_URL, _SERVICE_KEY)
            with self.assertRaises(DirectoryError) as context:
                await directory.create_principal("owner@acme.com", {}, confirmed=True)

        self.assertNotIsInstance(context.exception, PrincipalAlreadyExistsError)
        self.assertEqual(context.exception.message, "Database error saving new user")

    async def test_recovery_posts_email_with_redirect(self) -> None:
        transport = _RecordingTransport(httpx.Response(200, json={}), httpx.Response(429, json={"msg": "rate limit"}))
        redirect = "https://vendors.example.test/vendor/index.html"
        async with _client(transport) as client:
            directory = SupabaseDirectory(client, _BASE_URL, _SERVICE_KEY)
            await directory.generate_recovery_link("owner@acme.com", redirect)
            with self.assertRaises(DirectoryError):
                await directory.generate_recovery_link("owner@acme.com", redirect)

        request = transport.requests[0]
        self.assertEqual(request.url.path, "/auth/v1/recover")
        self.assertEqual(request.url.params["redirect_to"], redirect)
        self.assertEqual(json.loads(request.content), {"email": "owner@acme.com"})

    async def test_transport_failure_is_directory_error(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(refuse)) as client:
            directory = SupabaseDirectory(client, _BASE_URL, _SERVICE_KEY)
            with self.assertRaises(DirectoryError):
                await directory.get_principal_by_email("owner@acme.com")


class SupabaseVendorStoreTests(unittest.IsolatedAsyncioTestCase):
    async def test_find_by_code_parses_row(self) -> None:
        transport = _RecordingTransport(
            httpx.Response(
                200,
                json=[
                    {
                        "vendor_code": "ABC",
                        "vendor_name": "Acme Co",
                        "email": "owner@acme.com",
                        "created_at": "2024-01-02T03:04:05+00:00",
                        "updated_at": None,
                    }
                ],
            )
        )
        async with _client(transport) as client:
            record = await SupabaseVendorStore(client, _BASE_URL, _SERVICE_KEY).find_by_code("ABC")

        self.assertIsNotNone(record)
        self.assertEqual(record.vendor_name, "Acme Co")
        self.assertEqual(record.created_at, datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC))
        self.assertIsNone(record.updated_at)
        request = transport.requests[0]
        self.assertEqual(request.url.path, "/rest/v1/vendors")
        self.assertEqual(request.url.params["vendor_code"], "eq.ABC")

    async def test_find_by_code_handles_missing_and_ambiguous_rows(self) -> None:
        transport = _RecordingTransport(
            httpx.Response(200, json=[]),
            httpx.Response(200, json=[{"vendor_code": "ABC"}, {"vendor_code": "ABC"}]),
        )
        async with _client(transport) as client:
            store = SupabaseVendorStore(client, _BASE_URL, _SERVICE_KEY)
            self.assertIsNone(await store.find_by_code("ABC"))
            with self.assertRaises(AmbiguousVendorError):
                await store.find_by_code("ABC")

    async def test_insert_unique_violation_is_duplicate_key(self) -> None:
        transport = _RecordingTransport(
            httpx.Response(409, json={"code": "23505", "message": "duplicate key value violates unique constraint"}),
            httpx.Response(403, json={"code": "42501", "message": "permission denied for table vendors"}),
        )
        record = VendorRecord(vendor_code="ABC", vendor_name="Acme Co", email="owner@acme.com")
        async with _client(transport) as client:
            store = SupabaseVendorStore(client, _BASE_URL, _SERVICE_KEY)
            with self.assertRaises(DuplicateKeyError):
                await store.insert(record)
            with self.assertRaises(VendorStoreError) as context:
                await store.insert(record)

        self.assertNotIsInstance(context.exception, DuplicateKeyError)
        self.assertEqual(str(context.exception), "permission denied for table vendors")
        self.assertEqual(json.loads(transport.requests[0].content)[0]["vendor_code"], "ABC")

    async def test_update_contact_patches_single_vendor(self) -> None:
        transport = _RecordingTransport(httpx.Response(204))
        updated_at = datetime(2024, 5, 6, tzinfo=UTC)
        async with _client(transport) as client:
            await SupabaseVendorStore(client, _BASE_URL, _SERVICE_KEY, table="vendor_accounts").update_contact(
                "ABC",
                email="new@acme.com",
                vendor_name="Acme Co",
                updated_at=updated_at,
            )

        request = transport.requests[0]
        self.assertEqual(request.method, "PATCH")
        self.assertEqual(request.url.path, "/rest/v1/vendor_accounts")
        self.assertEqual(request.url.params["vendor_code"], "eq.ABC")
        self.assertEqual(json.loads(request.content)["email"], "new@acme.com")


class SessionVerifierTests(unittest.TestCase):
    def _token(self, **overrides: object) -> str:
        claims: dict[str, object] = {
            "sub": "u-1",
            "email": "admin@julinemart.test",
            "aud": "authenticated",
            "exp": datetime.now(UTC) + timedelta(minutes=5),
            "app_metadata": {"provider": "email", "role": "admin"},
        }
        claims.update(overrides)
        return jwt.encode(claims, _JWT_SECRET, algorithm="HS256")

    def test_valid_session_token_is_normalized(self) -> None:
        principal = SupabaseTokenVerifier(_JWT_SECRET).verify_token(self._token())

        self.assertEqual(principal.user_id, "u-1")
        self.assertEqual(principal.email, "admin@julinemart.test")
        self.assertEqual(principal.role, "admin")

    def test_self_assigned_user_metadata_role_is_not_trusted(self) -> None:
        token = self._token(app_metadata={"provider": "email"}, user_metadata={"role": "admin", "vendor_code": "ABC"})

        principal = SupabaseTokenVerifier(_JWT_SECRET).verify_token(token)

        self.assertEqual(principal.role, "vendor")
        self.assertEqual(principal.vendor_code, "ABC")

    def test_invalid_session_tokens_are_rejected(self) -> None:
        verifier = SupabaseTokenVerifier(_JWT_SECRET)
        tokens = [
            self._token(aud="anon"),
            self._token(exp=datetime.now(UTC) - timedelta(minutes=5)),
            "not-a-jwt",
        ]

        for token in tokens:
            with self.subTest(token=token):
                with self.assertRaises(AuthVerificationError):
                    verifier.verify_token(token)

    def test_unconfigured_secret_rejects_every_token(self) -> None:
        with self.assertRaises(AuthVerificationError):
            SupabaseTokenVerifier(None).verify_token(self._token())

    def test_verifier_selection_follows_settings(self) -> None:
        supabase = get_token_verifier(Settings(auth_provider="supabase", supabase_jwt_secret=_JWT_SECRET))
        mock = get_token_verifier(Settings(auth_provider="mock"))

        self.assertIsInstance(supabase, SupabaseTokenVerifier)
        self.assertIsInstance(mock, MockTokenVerifier)


if __name__ == "__main__":
    unittest.main()
