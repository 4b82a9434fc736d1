"""
Combs of Honey — Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for the failure modes of the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    CombsOfHoneyError (base)  → 500 Internal Server Error
    ├── ValidationError       → 400 Bad Request
    ├── NotFoundError         → 404 Not Found
    └── DatabaseError         → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class CombsOfHoneyError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 500s)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CombsOfHoneyError):
    """
    Raised when client input fails validation.

    When:    Malformed JSON body, missing honey type, non-integer comb id.
    HTTP:    400 Bad Request
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


class NotFoundError(CombsOfHoneyError):
    """
    Raised when a query returned no rows where at least one is required.

    When:    Unknown comb id, unknown (comb id, honey type) pair, or an
             empty comb / honey listing.
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


class DatabaseError(CombsOfHoneyError):
    """
    Raised when a persistence operation fails for any reason other than
    absence of rows.

    When:    Connection lost mid-query, duplicate (comb_id, type) key,
             foreign key violation, failed visit update.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; `context`
    (operation, original exception type) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
