"""Authentication schemas."""

from pydantic import BaseModel, Field


class SessionPrincipal(BaseModel):
    """Normalized platform session principal used by admin-only routes."""

    user_id: str = Field(min_length=1)
    email: str | None = None
    role: str = Field(default="vendor", min_length=1)
    vendor_code: str | None = None


class VendorLoginRequest(BaseModel):
    vendor_code: str = Field(min_length=1)
    # Accepted for client compatibility; not verified by the login flow.
    password: str | None = None


class VendorLoginResponse(BaseModel):
    vendor_name: str
    vendor_code: str
    token: str
