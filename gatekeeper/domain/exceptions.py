"""Domain exceptions for the Gatekeeper application.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.

Authentication failures carry an internal reason in details for logging and
auditing; the HTTP layer never forwards it to the client.
"""

from typing import Any


class GatekeeperException(Exception):
    """Base exception for all Gatekeeper application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an error response body."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class AuthenticationException(GatekeeperException):
    """Base for authentication failures. Always surfaces as a generic 401."""

    def __init__(
        self,
        message: str = "Authentication failed",
        error_code: str = "AUTHENTICATION_ERROR",
        reason: str | None = None,
    ) -> None:
        details = {"reason": reason} if reason else {}
        super().__init__(message, error_code, details)

    @property
    def reason(self) -> str:
        """Internal reason code (logged and audited, never returned)."""
        return str(self.details.get("reason", self.error_code))


class TenantInvalidException(AuthenticationException):
    """Raised when the tenant is missing, inactive, or past its validity cutoff."""

    def __init__(self, reason: str = "tenant_invalid") -> None:
        super().__init__("Tenant is not valid", "TENANT_INVALID", reason)


class InvalidCredentialsException(AuthenticationException):
    """Raised for a wrong email/password or an unknown, expired or rotated refresh token."""

    def __init__(self, reason: str = "invalid_credentials") -> None:
        super().__init__("Invalid credentials", "INVALID_CREDENTIALS", reason)


class AccountNotUsableException(AuthenticationException):
    """Raised when credentials are correct but the account is disabled or unconfirmed."""

    def __init__(self, reason: str = "account_not_usable") -> None:
        super().__init__("Account is not usable", "ACCOUNT_NOT_USABLE", reason)


class SubjectMismatchException(AuthenticationException):
    """Raised when a refresh token resolves to a different subject than the paired access token."""

    def __init__(
        self,
        reason: str = "subject_mismatch",
        subject_id: str | None = None,
        hinted_subject: str | None = None,
    ) -> None:
        super().__init__("Token subject mismatch", "SUBJECT_MISMATCH", reason)
        self.subject_id = subject_id
        self.hinted_subject = hinted_subject


class AuthorizationException(GatekeeperException):
    """Raised when the principal lacks a required role."""

    def __init__(self, role: str | None = None, message: str = "Permission denied") -> None:
        details = {"role": role} if role else {}
        super().__init__(message, "PERMISSION_DENIED", details)


class ConfigurationException(GatekeeperException):
    """Raised at startup for missing or weak configuration. Never per-request."""

    def __init__(self, message: str, setting: str | None = None) -> None:
        details = {"setting": setting} if setting else {}
        super().__init__(message, "CONFIGURATION_ERROR", details)


class DeliveryFailedException(GatekeeperException):
    """Raised when an outbox message cannot be delivered to a handler."""

    def __init__(self, message_id: str, handler_name: str | None, error: str) -> None:
        super().__init__(
            f"Delivery failed for outbox message {message_id}",
            "DELIVERY_FAILED",
            {"message_id": message_id, "handler": handler_name, "error": error},
        )


class ValidationException(GatekeeperException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(GatekeeperException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class TenantAlreadyExistsException(GatekeeperException):
    """Raised when creating a tenant whose identifier already exists."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(
            f"Tenant '{tenant_id}' already exists",
            "TENANT_ALREADY_EXISTS",
            {"tenant_id": tenant_id},
        )


class UserAlreadyExistsException(GatekeeperException):
    """Raised when registering an email that already exists in the tenant."""

    def __init__(self) -> None:
        super().__init__(
            "Email already registered in this tenant",
            "USER_ALREADY_EXISTS",
            {},
        )
