"""Vendor provisioning API schemas."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def _require_address(value: str) -> str:
    local, sep, domain = value.partition("@")
    if not sep or not local or not domain:
        raise ValueError("email must be an address")
    return value


EmailAddress = Annotated[str, Field(min_length=3), AfterValidator(_require_address)]


class ProvisionVendorRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    vendor_code: str = Field(min_length=1)
    vendor_name: str = Field(min_length=1)
    email: EmailAddress


class ProvisionVendorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    vendor_code: str
    vendor_name: str
    email: str
    is_new_vendor: bool = Field(alias="isNewVendor")
    auth_created: bool = Field(alias="authCreated")
    email_sent: bool = Field(alias="emailSent")
    user_id: str | None = Field(default=None, alias="userId")
    redirect_url: str = Field(alias="redirectUrl")
    message: str
    error: str | None = None


class PasswordResetRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailAddress


class PasswordResetResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    email: str
    email_sent: bool = Field(alias="emailSent")
    redirect_url: str = Field(alias="redirectUrl")
