"""Application exception types."""

from vendor_api.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


def validation_error(message: str, details: dict | None = None) -> ApiError:
    return ApiError(status_code=400, code="VALIDATION_ERROR", message=message, details=details)


def unauthorized(message: str) -> ApiError:
    return ApiError(status_code=401, code="UNAUTHORIZED", message=message)


def configuration_error(message: str) -> ApiError:
    return ApiError(status_code=500, code="CONFIGURATION_ERROR", message=message)


__all__ = ["ApiError", "configuration_error", "unauthorized", "validation_error"]
