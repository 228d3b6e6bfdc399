"""
Checkstate: Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the two failure classes the API
       reports: bad client input and storage failures.
How:   Each exception carries a fixed, user-facing message and an optional
       context dict. Global handlers in main.py turn them into a plain-text
       response whose body is exactly the message.

Exception Hierarchy:
    CheckStateError (base)
    ├── ValidationError   → 400 Bad Request
    └── StorageError      → 500 Internal Server Error

"Not found" situations (no directory on list, no marker on uncheck) are
normal outcomes and never raise.
"""

from typing import Any, Dict, Optional


class CheckStateError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error text (returned verbatim as the body)
        context:  Debug info such as paths and OS errors (logged, never returned)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CheckStateError):
    """
    Raised when the client sent a request the service cannot act on.

    When:  Missing md_id, missing check_id, unreadable body, malformed JSON.
    HTTP:  400 Bad Request
    """

    status_code = 400

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


class StorageError(CheckStateError):
    """
    Raised when a filesystem operation on the storage root fails.

    When:  Permission denied, I/O error, a path component that is a file
           where a directory is expected, and similar OS failures.
    HTTP:  500 Internal Server Error

    The message names the failed step ("Failed to create file"); the OS
    error and path go into context for the server log only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
