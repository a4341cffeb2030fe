"""
DocTrack Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the error scenarios of the service.
How:   Each exception carries a client-safe message and an optional context
       dict. Global handlers (registered in main.py) map them to HTTP
       responses; the context is logged, never returned.
Who:   Raised by the validator, the student service and the database handle.

Exception Hierarchy:
    DocTrackError (base)
    ├── ValidationError     → 400 Bad Request (missing/invalid fields, duplicates)
    ├── NotFoundError       → 404 Not Found
    ├── NotificationError   → 500 Internal Server Error (mail relay failed)
    └── DatabaseError       → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class DocTrackError(Exception):
    """
    Base exception for all DocTrack application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(DocTrackError):
    """
    Raised when client input fails validation.

    When:    Missing fields, malformed email, unknown request type, missing
             student ID, or a duplicate (email, request_type) registration.
    HTTP:    400 Bad Request
    """

    code = "validation_error"

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


class NotFoundError(DocTrackError):
    """
    Raised when a student request ID does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts
    that into this exception so the handler can answer 404.
    """

    code = "not_found"

    def __init__(
        self,
        message: str = "Student not found.",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class NotificationError(DocTrackError):
    """
    Raised when an email could not be delivered to the mail relay.

    The primary database write has already been committed when this is
    raised; the response reports the failure but nothing is rolled back.
    HTTP:    500 Internal Server Error
    """

    code = "email_error"

    def __init__(
        self,
        message: str = "Email service unavailable.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(DocTrackError):
    """
    Raised when database operations fail unexpectedly.

    When:    Database unreachable, connection lost mid-query, driver errors.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic. SQL text and
    driver details go to the server log through the context dict.
    """

    code = "server_error"

    def __init__(
        self,
        message: str = "Server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
