"""Vendor identity normalization rules."""

from dataclasses import dataclass

from vendor_api.errors import validation_error

_REQUIRED_FIELDS = ("vendor_code", "vendor_name", "email")

VENDOR_ROLE = "vendor"


@dataclass(frozen=True, slots=True)
class VendorIdentity:
    """Provisioning input after normalization: code upper, email lower."""

    vendor_code: str
    vendor_name: str
    email: str

    def principal_metadata(self) -> dict[str, str]:
        return {
            "role": VENDOR_ROLE,
            "vendor_code": self.vendor_code,
            "vendor_name": self.vendor_name,
        }


def normalize_vendor_code(vendor_code: str) -> str:
    return vendor_code.strip().upper()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def normalize_identity(vendor_code: str | None, vendor_name: str | None, email: str | None) -> VendorIdentity:
    """Validate required provisioning fields and return the normalized identity."""
    values = {"vendor_code": vendor_code, "vendor_name": vendor_name, "email": email}
    missing = [name for name in _REQUIRED_FIELDS if not (values[name] or "").strip()]
    if missing:
        raise validation_error(
            f"Missing required fields: {', '.join(_REQUIRED_FIELDS)}",
            details={"missing": missing},
        )

    return VendorIdentity(
        vendor_code=normalize_vendor_code(vendor_code),
        vendor_name=vendor_name.strip(),
        email=normalize_email(email),
    )
