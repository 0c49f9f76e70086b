"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler, request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vendor_api.adapters.directory import DirectoryService, InMemoryDirectory, SupabaseDirectory
from vendor_api.core.config import Settings, get_settings
from vendor_api.errors import ApiError
from vendor_api.repositories.base import VendorStore
from vendor_api.repositories.memory import InMemoryVendorStore
from vendor_api.repositories.supabase import SupabaseVendorStore
from vendor_api.routes import auth_router, vendors_router
from vendor_api.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

_PROVISIONING_VALIDATION_PATHS: set[tuple[str, str]] = {
    ("POST", "/api/v1/vendor-auth"),
    ("POST", "/api/v1/vendor-auth/password-reset"),
}

_LOGIN_VALIDATION_PATHS: set[tuple[str, str]] = {
    ("POST", "/api/v1/login"),
}


def _missing_fields(exc: RequestValidationError) -> list[str]:
    fields: list[str] = []
    for error in exc.errors():
        location = error.get("loc", ())
        if len(location) >= 2 and location[0] == "body":
            fields.append(str(location[1]))
    return fields


def _supabase_credentials(settings: Settings) -> tuple[str, str] | None:
    if settings.supabase_url and settings.supabase_service_role_key:
        return settings.supabase_url, settings.supabase_service_role_key
    return None


def _build_vendor_store(settings: Settings, http_client: httpx.AsyncClient | None) -> VendorStore | None:
    """Construct the configured record store; ``None`` marks a missing configuration."""
    if settings.record_store == "memory":
        return InMemoryVendorStore()

    credentials = _supabase_credentials(settings)
    if credentials is None or http_client is None:
        logger.error("startup.misconfigured component=record_store reason=missing_supabase_credentials")
        return None
    return SupabaseVendorStore(http_client, *credentials, table=settings.vendors_table)


def _build_directory(settings: Settings, http_client: httpx.AsyncClient | None) -> DirectoryService | None:
    if settings.directory_provider == "mock":
        return InMemoryDirectory()

    credentials = _supabase_credentials(settings)
    if credentials is None or http_client is None:
        logger.error("startup.misconfigured component=directory reason=missing_supabase_credentials")
        return None
    return SupabaseDirectory(http_client, *credentials)


def create_app(
    settings: Settings | None = None,
    *,
    vendor_store: VendorStore | None = None,
    directory: DirectoryService | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    needs_http = (vendor_store is None and settings.record_store == "supabase") or (
        directory is None and settings.directory_provider == "supabase"
    )
    http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds) if needs_http else None

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if http_client is not None:
            await http_client.aclose()

    app = FastAPI(title="JulineMart Vendor API", version="1.0.0", lifespan=lifespan)
    # Routes read settings through ``get_settings``; pin them to the ones this app was built from.
    app.dependency_overrides[get_settings] = lambda: settings

    app.state.vendor_store = vendor_store if vendor_store is not None else _build_vendor_store(settings, http_client)
    app.state.directory = directory if directory is not None else _build_directory(settings, http_client)
    app.state.http_client = http_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.payload.model_dump(mode="json", exclude_none=True),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 405:
            payload = ErrorResponse(code="METHOD_NOT_ALLOWED", message="Method not allowed")
            return JSONResponse(
                status_code=405,
                content=payload.model_dump(exclude_none=True),
                headers=getattr(exc, "headers", None),
            )
        return await http_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Mounted routes report their path without the router prefix; key on the request path.
        route_path = request.url.path.rstrip("/") or "/"
        route_key = (request.method.upper(), route_path)
        if route_key in _PROVISIONING_VALIDATION_PATHS:
            if route_path.endswith("/password-reset"):
                message = "A valid email is required"
            else:
                message = "Missing required fields: vendor_code, vendor_name, email"
            payload = ErrorResponse(
                code="VALIDATION_ERROR",
                message=message,
                details={"invalid": _missing_fields(exc)},
            )
            return JSONResponse(status_code=400, content=payload.model_dump())
        # Login never reveals why a payload was rejected.
        if route_key in _LOGIN_VALIDATION_PATHS:
            payload = ErrorResponse(code="UNAUTHORIZED", message="Invalid vendor")
            return JSONResponse(status_code=401, content=payload.model_dump(exclude_none=True))

        return await request_validation_exception_handler(request, exc)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    api_prefix = "/api/v1"
    app.include_router(vendors_router, prefix=api_prefix)
    app.include_router(auth_router, prefix=api_prefix)

    return app


app = create_app()
