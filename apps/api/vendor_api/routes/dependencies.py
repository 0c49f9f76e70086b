"""Dependency wiring for routes."""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vendor_api.adapters.auth import (
    AuthVerificationError,
    MockTokenVerifier,
    SupabaseTokenVerifier,
    TokenVerifier,
)
from vendor_api.adapters.directory import DirectoryService
from vendor_api.core.config import Settings, get_settings
from vendor_api.core.logging_safety import safe_log_identifier
from vendor_api.errors import ApiError, configuration_error, unauthorized
from vendor_api.repositories.base import VendorStore
from vendor_api.schemas.auth import SessionPrincipal
from vendor_api.services.claim_tokens import ClaimTokenIssuer
from vendor_api.services.login import LoginOrchestrator
from vendor_api.services.principals import PrincipalResolver
from vendor_api.services.provisioning import ProvisioningOrchestrator
from vendor_api.services.recovery import RecoveryLinkIssuer
from vendor_api.services.vendor_records import VendorLookup, VendorRecordUpserter

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "supabase":
        return SupabaseTokenVerifier(jwt_secret=settings.supabase_jwt_secret)
    return MockTokenVerifier()


async def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
) -> SessionPrincipal:
    """Validate bearer session token and attach normalized principal to request context."""
    correlation_id = _request_correlation_id(request)
    safe_correlation_id = safe_log_identifier(correlation_id, prefix="cid")
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=invalid_or_missing_bearer",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise unauthorized("Invalid or missing bearer token")

    try:
        principal = verifier.verify_token(credentials.credentials)
    except AuthVerificationError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise unauthorized(str(exc) or "Invalid bearer token") from exc

    safe_principal_id = safe_log_identifier(principal.user_id, prefix="pid")
    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s role=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_principal_id,
        principal.role,
    )
    request.state.auth_principal = principal
    return principal


async def require_provisioning_caller(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SessionPrincipal | None:
    """Require an admin session when ``require_admin_session`` is enabled."""
    if not settings.require_admin_session:
        return None

    principal = await get_authenticated_principal(request, credentials, verifier)
    if principal.role != ADMIN_ROLE:
        logger.warning(
            "auth.forbidden correlation_id=%s path=%s role=%s",
            safe_log_identifier(_request_correlation_id(request), prefix="cid"),
            request.url.path,
            principal.role,
        )
        raise ApiError(status_code=403, code="FORBIDDEN", message="Admin session required")
    return principal


def get_vendor_store(request: Request) -> VendorStore:
    store = getattr(request.app.state, "vendor_store", None)
    if store is None:
        raise configuration_error("Record store is not configured")
    return store


def get_directory(request: Request) -> DirectoryService:
    directory = getattr(request.app.state, "directory", None)
    if directory is None:
        raise configuration_error("Directory service is not configured")
    return directory


def get_recovery_link_issuer(
    directory: Annotated[DirectoryService, Depends(get_directory)],
) -> RecoveryLinkIssuer:
    return RecoveryLinkIssuer(directory)


def get_provisioning_orchestrator(
    store: Annotated[VendorStore, Depends(get_vendor_store)],
    directory: Annotated[DirectoryService, Depends(get_directory)],
    recovery: Annotated[RecoveryLinkIssuer, Depends(get_recovery_link_issuer)],
) -> ProvisioningOrchestrator:
    return ProvisioningOrchestrator(
        upserter=VendorRecordUpserter(store),
        resolver=PrincipalResolver(directory),
        recovery=recovery,
    )


def get_claim_token_issuer(settings: Annotated[Settings, Depends(get_settings)]) -> ClaimTokenIssuer:
    return ClaimTokenIssuer(
        settings.signing_secret,
        issuer=settings.claim_token_issuer,
        ttl=timedelta(hours=settings.claim_token_ttl_hours),
    )


def get_login_orchestrator(
    store: Annotated[VendorStore, Depends(get_vendor_store)],
    issuer: Annotated[ClaimTokenIssuer, Depends(get_claim_token_issuer)],
) -> LoginOrchestrator:
    return LoginOrchestrator(VendorLookup(store), issuer)
