"""
ClientHub Backend - Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for every failure the API reports.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and dependencies; caught by global handlers.
When:  During request processing when recoverable errors occur.

Exception Hierarchy:
    ClientHubError (base)
    ├── ValidationError              → 400 Bad Request
    │   └── UnsupportedMediaTypeError → 400 Bad Request (disallowed image extension)
    ├── AuthError
    │   ├── InvalidCredentialsError  → 401 Unauthorized
    │   ├── MissingTokenError        → 401 Unauthorized
    │   └── InvalidTokenError        → 403 Forbidden
    ├── NotFoundError                → 404 Not Found
    ├── DatabaseError                → 500 Internal Server Error
    ├── FileStorageError             → 500 Internal Server Error
    └── ServiceBusyError             → 503 Service Unavailable (admission control)
"""

from typing import Any, Dict, Iterable, Optional


class ClientHubError(Exception):
    """
    Base exception for all ClientHub application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info; logged, and returned only by handlers
                  that explicitly opt in (see EXPOSE_ERROR_DETAILS)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ClientHubError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, unparseable numbers/dates, short passwords.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

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


class MissingFieldsError(ValidationError):
    """One or more mandatory fields were absent, null, or blank."""

    def __init__(self, missing: Iterable[str], message: str = "Missing required fields"):
        fields = list(missing)
        super().__init__(message=message, context={"missing_fields": fields})
        self.missing = fields


class UnsupportedMediaTypeError(ValidationError):
    """
    Raised when an upload's extension is not in the image allow-list.

    HTTP:    400 Bad Request
    """

    error_code = "unsupported_media_type"

    def __init__(self, filename: str, allowed: Iterable[str]):
        allowed_list = sorted(allowed)
        super().__init__(
            message=(
                "Only image files are allowed! "
                f"Supported extensions: {', '.join(allowed_list)}"
            ),
            field="image",
            context={"filename": filename, "allowed": allowed_list},
        )


class AuthError(ClientHubError):
    """Base for authentication and authorization failures."""

    status_code = 401
    error_code = "unauthorized"


class InvalidCredentialsError(AuthError):
    """Username/password (or current password) did not match."""

    error_code = "invalid_credentials"

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message=message)


class MissingTokenError(AuthError):
    """No bearer token was supplied at all."""

    error_code = "missing_token"

    def __init__(self, message: str = "Access token required"):
        super().__init__(message=message)


class InvalidTokenError(AuthError):
    """
    A bearer token was supplied but cannot be trusted.

    When:    Bad signature, malformed token, expired token, missing username
             claim, or a token issued before the administrator's last logout.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "invalid_token"

    def __init__(self, message: str = "Invalid or expired token", reason: Optional[str] = None):
        super().__init__(message=message, context={"reason": reason} if reason else None)


class NotFoundError(ClientHubError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown client_id, unknown administrator, missing image file.
    HTTP:    404 Not Found
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ClientHubError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, constraint violation, pool timeout.
    HTTP:    500 Internal Server Error
    """

    status_code = 500
    error_code = "database_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(ClientHubError):
    """
    Raised when the asset directory cannot be written or read.

    HTTP:    500 Internal Server Error
    """

    status_code = 500
    error_code = "storage_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServiceBusyError(ClientHubError):
    """
    Raised when too many requests are already waiting for a database connection.

    HTTP:    503 Service Unavailable, with a Retry-After header
    """

    status_code = 503
    error_code = "service_busy"

    def __init__(self, in_flight: int, capacity: int, retry_after: int = 1):
        super().__init__(
            message="The server is busy. Please retry shortly.",
            context={"in_flight": in_flight, "capacity": capacity},
        )
        self.retry_after = retry_after
