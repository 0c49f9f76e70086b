"""Directory principal resolution and recovery link tests."""

from __future__ import annotations

import unittest

from vendor_api.adapters.directory import DirectoryPrincipal, InMemoryDirectory, PrincipalNotFoundError
from vendor_api.adapters.directory.mock_directory import RecoveryRequest
from vendor_api.domain.vendor_identity import normalize_identity
from vendor_api.services.principals import PrincipalResolutionError, PrincipalResolver
from vendor_api.services.recovery import RecoveryLinkIssuer

_REDIRECT = "https://vendors.example.test/vendor/index.html"


class _MissFirstLookupDirectory(InMemoryDirectory):
    """Reports a miss on the first lookup only, like a replica that lags a concurrent create."""

    def __init__(self) -> None:
        super().__init__()
        self.lookups = 0

    async def get_principal_by_email(self, email: str) -> DirectoryPrincipal:
        self.lookups += 1
        if self.lookups == 1:
            raise PrincipalNotFoundError("User not found")
        return await super().get_principal_by_email(email)


class PrincipalResolverTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.directory = InMemoryDirectory()
        self.resolver = PrincipalResolver(self.directory)
        self.identity = normalize_identity("abc", "Acme Co", "Owner@Acme.com")

    async def test_existing_principal_is_reused(self) -> None:
        self.directory.principals["owner@acme.com"] = DirectoryPrincipal(principal_id="p-1", email="owner@acme.com")

        resolution = await self.resolver.resolve(self.identity)

        self.assertTrue(resolution.exists)
        self.assertFalse(resolution.auth_created)
        self.assertEqual(resolution.principal_id, "p-1")
        self.assertEqual(self.directory.create_count, 0)

    async def test_missing_principal_is_created_confirmed_with_vendor_metadata(self) -> None:
        resolution = await self.resolver.resolve(self.identity)

        self.assertFalse(resolution.exists)
        self.assertTrue(resolution.auth_created)
        principal = self.directory.principals["owner@acme.com"]
        self.assertEqual(resolution.principal_id, principal.principal_id)
        self.assertEqual(principal.metadata, {"role": "vendor", "vendor_code": "ABC", "vendor_name": "Acme Co"})
        self.assertIn("owner@acme.com", self.directory.confirmed_emails)

    async def test_unreliable_lookup_never_duplicates_principal(self) -> None:
        first = await self.resolver.resolve(self.identity)
        self.directory.lookup_unreliable = True

        second = await self.resolver.resolve(self.identity)

        self.assertTrue(first.auth_created)
        self.assertTrue(second.exists)
        self.assertFalse(second.auth_created)
        self.assertEqual(len(self.directory.principals), 1)
        self.assertEqual(self.directory.create_count, 1)

    async def test_lost_create_race_refetches_existing_principal_id(self) -> None:
        directory = _MissFirstLookupDirectory()
        directory.principals["owner@acme.com"] = DirectoryPrincipal(principal_id="p-7", email="owner@acme.com")

        resolution = await PrincipalResolver(directory).resolve(self.identity)

        self.assertTrue(resolution.exists)
        self.assertFalse(resolution.auth_created)
        self.assertEqual(resolution.principal_id, "p-7")
        self.assertEqual(directory.create_count, 0)

    async def test_other_create_failures_preserve_message(self) -> None:
        self.directory.create_failure_message = "Database error saving new user"

        with self.assertRaises(PrincipalResolutionError) as context:
            await self.resolver.resolve(self.identity)

        self.assertEqual(context.exception.message, "Database error saving new user")


class RecoveryLinkIssuerTests(unittest.IsolatedAsyncioTestCase):
    async def test_recovery_request_targets_redirect(self) -> None:
        directory = InMemoryDirectory()

        sent = await RecoveryLinkIssuer(directory).issue("owner@acme.com", _REDIRECT)

        self.assertTrue(sent)
        self.assertEqual(directory.recovery_requests, [RecoveryRequest(email="owner@acme.com", redirect_to=_REDIRECT)])

    async def test_recovery_failure_is_reported_not_raised(self) -> None:
        directory = InMemoryDirectory(recovery_failure_message="Email rate limit exceeded")

        sent = await RecoveryLinkIssuer(directory).issue("owner@acme.com", _REDIRECT)

        self.assertFalse(sent)
        self.assertEqual(directory.recovery_requests, [])


if __name__ == "__main__":
    unittest.main()
