from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse


class AppError(Exception):
    """Base application error with consistent schema."""

    def __init__(
        self,
        message: str,
        code: str = "ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class ValidationError(AppError):
    def __init__(self, message: str = "Invalid request", details: dict[str, Any] | None = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=status.HTTP_400_BAD_REQUEST, details=details)


class SignatureInvalidError(AppError):
    def __init__(self, message: str = "Invalid signature"):
        super().__init__(message, code="SIGNATURE_INVALID", status_code=status.HTTP_400_BAD_REQUEST)


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, code="UNAUTHORIZED", status_code=status.HTTP_401_UNAUTHORIZED)


class ForbiddenError(AppError):
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, code="FORBIDDEN", status_code=status.HTTP_403_FORBIDDEN)


class NotFoundError(AppError):
    def __init__(self, message: str = "Not found", code: str = "NOT_FOUND"):
        super().__init__(message, code=code, status_code=status.HTTP_404_NOT_FOUND)


class UserNotFoundError(AppError):
    def __init__(self, message: str = "User not found"):
        super().__init__(message, code="USER_NOT_FOUND", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class ConflictError(AppError):
    def __init__(self, message: str = "Conflict", details: dict[str, Any] | None = None):
        super().__init__(message, code="CONFLICT", status_code=status.HTTP_409_CONFLICT, details=details)


class ConfigurationError(AppError):
    def __init__(self, message: str = "Service not configured"):
        super().__init__(message, code="CONFIGURATION_ERROR", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class AccountDeletionFailedError(AppError):
    def __init__(self, message: str = "Account deletion failed", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code="ACCOUNT_DELETION_FAILED",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


class GatewayError(AppError):
    """External service (payment gateway, nutrition provider) failed or returned garbage."""

    def __init__(self, message: str = "Upstream service error", details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code="GATEWAY_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
        )


class UpstreamError(GatewayError):
    pass


def error_body(exc: AppError) -> dict[str, Any]:
    return {
        "error": exc.message,
        "code": exc.code,
        "details": exc.details,
    }


def error_response(request: Request, exc: AppError) -> ORJSONResponse:
    body = error_body(exc)
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    return ORJSONResponse(status_code=exc.status_code, content=body)


async def app_exception_handler(request: Request, exc: AppError) -> ORJSONResponse:
    return error_response(request, exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    # Body shape errors are reported like missing fields: 400, never reaching services.
    errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in exc.errors()]
    return error_response(request, ValidationError("Validation error", details={"errors": errors}))


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    from fittrack.core.logging import get_logger
    get_logger(__name__).exception("unhandled_exception", exc_info=exc)
    return error_response(request, AppError("Internal server error", code="INTERNAL_ERROR"))
