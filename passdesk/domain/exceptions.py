"""Domain exceptions for the passdesk export service.

Defines domain-level exceptions for export preconditions and per-unit
failures. These exceptions are independent of infrastructure concerns.
Presentation layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class PassdeskException(Exception):
    """Base exception for all passdesk application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, category).
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
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(PassdeskException):
    """Raised when input validation fails (e.g. unknown category or format)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class NotAuthenticatedException(PassdeskException):
    """Raised when no authenticated user is available for an export call."""

    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message, "NOT_AUTHENTICATED")


class NoProjectSelectedException(PassdeskException):
    """Raised when the caller has not selected a project."""

    def __init__(self, message: str = "No project selected") -> None:
        super().__init__(message, "NO_PROJECT_SELECTED")


class FetchException(PassdeskException):
    """Raised by the record store when one category query fails.

    Never reaches export callers: the record fetcher downgrades it to an
    empty result and logs it.
    """

    def __init__(self, path: str, reason: str) -> None:
        """Initialize with the collection/document path and failure reason.

        Args:
            path: Store path that was queried (e.g. projects/p1/orders).
            reason: Underlying error text.
        """
        super().__init__(
            f"Failed to fetch {path}: {reason}",
            "FETCH_ERROR",
            {"path": path},
        )


class SerializationException(PassdeskException):
    """Raised when export data cannot be encoded (e.g. cyclic or unsupported values)."""

    def __init__(self, export_format: str, reason: str) -> None:
        super().__init__(
            f"Cannot serialize export as {export_format}: {reason}",
            "SERIALIZATION_ERROR",
            {"format": export_format},
        )


class DeliveryException(PassdeskException):
    """Raised when a delivery sink cannot persist an export file."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(
            f"Failed to deliver {filename}: {reason}",
            "DELIVERY_ERROR",
            {"filename": filename},
        )


class StoreUnavailableException(PassdeskException):
    """Raised when an operation requires Firestore but it is not configured."""

    def __init__(self) -> None:
        super().__init__(
            message="Document store is not configured. Set FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH.",
            error_code="STORE_UNAVAILABLE",
        )
