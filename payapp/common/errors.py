"""Error kinds surfaced by the payments layer.

Every error raised to callers derives from `PaymentAppError` so the HTTP
surface (and any other caller) can map them without string matching.
"""

from typing import Any


class PaymentAppError(Exception):
    """Base error for the payments layer."""

    error_code: str = "PAYMENT_APP_ERROR"
    message: str = "Payment operation failed"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.error_code = error_code or self.__class__.error_code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(error_code={self.error_code!r}, message={self.message!r})"


class InvalidRequestError(PaymentAppError, ValueError):
    """Request rejected before any provider call."""

    error_code = "INVALID_REQUEST"
    message = "Request validation failed"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message=message, details={"field": field})


class ProviderError(PaymentAppError):
    """The downstream payment provider rejected or failed the request.

    `error_code` carries the provider-supplied reason code verbatim
    (for example `card_declined` or `resource_missing`).
    """

    error_code = "provider_error"
    message = "Payment provider request failed"

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message=message, error_code=code, details=details)


class OperationCancelledError(PaymentAppError):
    """The caller's cancellation signal fired before the operation completed."""

    error_code = "CANCELLED"
    message = "Operation cancelled"
