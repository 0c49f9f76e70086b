"""Vendor login and session routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from vendor_api.routes.dependencies import get_authenticated_principal, get_login_orchestrator
from vendor_api.schemas.auth import SessionPrincipal, VendorLoginRequest, VendorLoginResponse
from vendor_api.schemas.error import ErrorResponse, UnauthorizedError
from vendor_api.services.login import LoginOrchestrator

router = APIRouter(tags=["Auth"])


@router.options("/login", status_code=status.HTTP_204_NO_CONTENT, include_in_schema=False)
async def login_preflight() -> Response:
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/login",
    response_model=VendorLoginResponse,
    responses={401: {"model": UnauthorizedError}, 500: {"model": ErrorResponse}},
)
async def login(
    payload: VendorLoginRequest,
    orchestrator: Annotated[LoginOrchestrator, Depends(get_login_orchestrator)],
) -> VendorLoginResponse:
    return await orchestrator.login(vendor_code=payload.vendor_code, password=payload.password)


@router.get(
    "/session",
    response_model=SessionPrincipal,
    responses={401: {"model": UnauthorizedError}},
)
async def get_session(
    principal: Annotated[SessionPrincipal, Depends(get_authenticated_principal)],
) -> SessionPrincipal:
    return principal
