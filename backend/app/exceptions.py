"""
Kavin's Catalog Backend — Custom Exception Hierarchy
======================================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, dependencies and middleware; caught by global handlers.

Exception Hierarchy:
    CatalogError (base)
    ├── ValidationError                    → 400 Bad Request
    ├── AuthenticationError                → 401 Unauthorized
    ├── PermissionDeniedError              → 403 Forbidden
    ├── AccountConfirmationRequiredError   → 403 Forbidden
    ├── NotFoundError                      → 404 Not Found
    ├── OfflineModeAvailableError          → 409 Conflict
    ├── RateLimitExceededError             → 429 Too Many Requests
    ├── FileStorageError                   → 500 Internal Server Error
    ├── DatabaseError                      → 500 Internal Server Error
    ├── LLMServiceError                    → 503 Service Unavailable
    ├── CircuitBreakerOpenError            → 503 Service Unavailable
    └── ExternalServiceError               → 503 Service Unavailable
        └── AuthProviderError              → 503 (normally handled by AuthService)
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
    """
    Base exception for all catalog application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client
                  unless the handler chooses to expose it as `details`)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatalogError):
    """
    Raised when client input fails a business rule.

    When:    Missing product name, variation without sizes, unsupported image, etc.
    HTTP:    400 Bad Request (schema errors stay FastAPI's 422)
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AuthenticationError(CatalogError):
    """
    Raised when the caller is not signed in or the credentials were rejected.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(CatalogError):
    """
    Raised when a signed-in user lacks the role for an operation, or tries
    to write while in offline (view-only) mode.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AccountConfirmationRequiredError(CatalogError):
    """
    Raised when the account exists but its email address is not confirmed yet.

    When:    Sign-in answered "email not confirmed", or a VIP account was just
             provisioned and the provider did not open a session.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        email: str,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["email"] = email
        super().__init__(
            message=message
            or "Your account exists but the email address is not confirmed. "
               "Check your inbox (and spam folder).",
            context=ctx,
        )
        self.email = email


class NotFoundError(CatalogError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class OfflineModeAvailableError(CatalogError):
    """
    Raised when online sign-in failed but the credentials match a built-in
    account, and the client has not opted into offline mode yet.

    How:     The client asks the user, then repeats the login with
             `allow_offline=true`.
    HTTP:    409 Conflict
    """

    def __init__(
        self,
        email: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["email"] = email
        ctx["offline_available"] = True
        super().__init__(
            message=(
                "The server is unavailable or the cloud credentials are invalid. "
                "You can enter OFFLINE MODE (view only)."
            ),
            context=ctx,
        )
        self.email = email


class RateLimitExceededError(CatalogError):
    """
    Raised when a client (or the auth provider on our behalf) is throttled.

    HTTP:    429 Too Many Requests
    """

    def __init__(
        self,
        retry_after: int = 60,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(
            message=message
            or f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests.",
            context=ctx,
        )
        self.retry_after = retry_after


class FileStorageError(CatalogError):
    """
    Raised when an image could not be processed or uploaded to object storage.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CatalogError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error
    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LLMServiceError(CatalogError):
    """
    Raised when the text generation service fails after all retries.

    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        message: str = "AI description service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class CircuitBreakerOpenError(CatalogError):
    """
    Raised when the Gemini circuit breaker is OPEN.

    How circuit breaker works:
        CLOSED (normal) → failures increment counter
        → After N failures → OPEN (reject all calls for the recovery timeout)
        → After the timeout → HALF-OPEN (allow one test call)
        → If test succeeds → CLOSED
        → If test fails → OPEN again
    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"AI service is temporarily unavailable due to repeated failures. "
            f"The service will automatically retry in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time


class ExternalServiceError(CatalogError):
    """
    Raised when the auth/storage platform fails or is not configured.

    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        message: str = "An external service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthProviderError(ExternalServiceError):
    """
    Raised by the Supabase gateway when an auth call is rejected.

    What:    Wraps the provider's message so AuthService can branch on it
             (invalid credentials, unconfirmed email, rate limit) without
             importing the SDK's exception types.
    """

    def __init__(
        self,
        provider_message: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=provider_message or "Unknown login error", context=context)
        self.provider_message = provider_message or ""

    @property
    def is_invalid_credentials(self) -> bool:
        return "invalid login credentials" in self.provider_message.lower()

    @property
    def is_email_not_confirmed(self) -> bool:
        return "email not confirmed" in self.provider_message.lower()

    @property
    def is_rate_limited(self) -> bool:
        return "rate limit" in self.provider_message.lower()
