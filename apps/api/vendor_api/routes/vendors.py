"""Vendor provisioning routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from vendor_api.core.config import Settings, get_settings
from vendor_api.domain.vendor_identity import normalize_email
from vendor_api.errors import ApiError
from vendor_api.routes.dependencies import (
    get_provisioning_orchestrator,
    get_recovery_link_issuer,
    require_provisioning_caller,
)
from vendor_api.schemas.auth import SessionPrincipal
from vendor_api.schemas.error import ErrorResponse, MethodNotAllowedError
from vendor_api.schemas.vendor import (
    PasswordResetRequest,
    PasswordResetResponse,
    ProvisionVendorRequest,
    ProvisionVendorResponse,
)
from vendor_api.services.provisioning import ProvisioningOrchestrator
from vendor_api.services.recovery import RecoveryLinkIssuer

router = APIRouter(prefix="/vendor-auth", tags=["Vendors"])


@router.options("", status_code=status.HTTP_204_NO_CONTENT, include_in_schema=False)
async def provision_vendor_preflight() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "",
    response_model=ProvisionVendorResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        405: {"model": MethodNotAllowedError},
        500: {"model": ErrorResponse},
    },
)
async def provision_vendor(
    payload: ProvisionVendorRequest,
    _: Annotated[SessionPrincipal | None, Depends(require_provisioning_caller)],
    orchestrator: Annotated[ProvisioningOrchestrator, Depends(get_provisioning_orchestrator)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ProvisionVendorResponse:
    redirect_url = settings.vendor_redirect_url
    result = await orchestrator.provision(
        vendor_code=payload.vendor_code,
        vendor_name=payload.vendor_name,
        email=payload.email,
        redirect_to=redirect_url,
    )
    return ProvisionVendorResponse(
        success=True,
        vendor_code=result.identity.vendor_code,
        vendor_name=result.identity.vendor_name,
        email=result.identity.email,
        is_new_vendor=result.is_new_vendor,
        auth_created=result.auth_created,
        email_sent=result.email_sent,
        user_id=result.user_id,
        redirect_url=redirect_url,
        message=result.message,
        error=result.error,
    )


@router.post(
    "/password-reset",
    response_model=PasswordResetResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def send_password_reset(
    payload: PasswordResetRequest,
    _: Annotated[SessionPrincipal | None, Depends(require_provisioning_caller)],
    recovery: Annotated[RecoveryLinkIssuer, Depends(get_recovery_link_issuer)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> PasswordResetResponse:
    email = normalize_email(payload.email)
    redirect_url = settings.vendor_redirect_url
    if not await recovery.issue(email, redirect_url):
        raise ApiError(
            status_code=502,
            code="RECOVERY_EMAIL_FAILED",
            message="Password reset email could not be sent",
        )
    return PasswordResetResponse(success=True, email=email, email_sent=True, redirect_url=redirect_url)
