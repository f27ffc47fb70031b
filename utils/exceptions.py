"""
Custom exception classes for better error handling.
Provides specific error types instead of generic exceptions.

The HTTP layer maps each type to a status code (see ``server.error_middleware``).
"""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class BookingNotFoundError(DatabaseError):
    """Raised when a booking is not found."""

    pass


class BlogNotFoundError(DatabaseError):
    """Raised when a blog post is not found."""

    pass


class Unauthorized(Exception):
    """Raised when the shared admin secret does not match."""

    pass


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


class PaymentError(Exception):
    """Base exception for payment operations."""

    pass


class ProviderUnconfigured(PaymentError):
    """Raised when the provider credentials needed for a call are absent."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"{provider} not configured")


class ProviderError(PaymentError):
    """Raised when a payment provider call fails (transport or validation)."""

    def __init__(self, provider: str, message: str, status: int | None = None):
        self.provider = provider
        self.status = status
        super().__init__(message)


class IncompleteCharge(PaymentError):
    """Raised when the provider does not report a completed charge."""

    def __init__(self, reference: str, provider_status: str | None = None):
        self.reference = reference
        self.provider_status = provider_status
        detail = f" (status: {provider_status})" if provider_status else ""
        super().__init__(f"Payment {reference} was not completed{detail}")


class ConfirmationInProgress(PaymentError):
    """Raised when the same payment reference is already being confirmed."""

    def __init__(self, reference: str):
        self.reference = reference
        super().__init__(f"Payment {reference} is already being confirmed")


class NotificationError(Exception):
    """Raised by mail transports when a message cannot be sent."""

    pass
