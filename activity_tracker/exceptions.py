"""
Activity Tracker — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the different failure scenarios.
How:   Each exception carries a user-facing message and an optional context
       dict. Handlers either recover from them locally (validation, username
       conflicts) or let them reach the boundary handlers registered in
       main.py, which log the context and render the error page.
Who:   Raised by services, the auth dependency and route handlers.

Exception Hierarchy:
    ActivityTrackerError (base)
    ├── ValidationError              → form re-rendered with messages
    ├── NotFoundError                → error page, 404
    ├── InvalidPageError             → error page, 404
    ├── InvalidSortError             → error page, 404
    ├── AuthenticationRequiredError  → redirect to the sign-in page
    └── DatabaseError                → error page, 404 (details logged only)
        └── UniquenessConflictError  → form re-rendered with "username taken"
"""

from typing import Any, Dict, List, Optional


class ActivityTrackerError(Exception):
    """
    Base exception for all Activity Tracker application errors.

    Attributes:
        message:  User-facing error description (safe to render)
        context:  Additional debug info (logged but NOT rendered)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ActivityTrackerError):
    """
    Raised when submitted form values break one or more field rules.

    Carries every violated rule's message so the handler can flash all of them
    at once, plus the submitted values so the form can be shown again. Never
    escalated to the boundary handler.
    """

    def __init__(
        self,
        messages: List[str],
        values: Optional[Dict[str, str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.messages = list(messages)
        # Submitted (trimmed) values for re-rendering; kept out of `context`,
        # which is logged
        self.values = dict(values or {})
        super().__init__(
            message="; ".join(self.messages) or "Validation failed",
            context=context,
        )


class NotFoundError(ActivityTrackerError):
    """
    Raised when a requested resource does not exist or is not owned by the
    signed-in account. Ownership failures are reported exactly like missing
    rows so other accounts' ids are not disclosed.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found."
            if resource_id is not None:
                message = f"{resource.capitalize()} '{resource_id}' was not found."
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InvalidPageError(ActivityTrackerError):
    """Raised for a page number that is not an integer in [1, number of pages]."""

    def __init__(
        self,
        page: Any = None,
        number_of_pages: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["requested_page"] = page
        if number_of_pages is not None:
            ctx["number_of_pages"] = number_of_pages
        super().__init__(message="Invalid page number requested.", context=ctx)


class InvalidSortError(ActivityTrackerError):
    """Raised for a sort column or direction outside the allow-list."""

    def __init__(
        self,
        column: Any = None,
        direction: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["column"] = column
        if direction is not None:
            ctx["direction"] = direction
        message = "Invalid column name." if direction is None else "Invalid sort order."
        super().__init__(message=message, context=ctx)


class AuthenticationRequiredError(ActivityTrackerError):
    """
    Raised by the auth gate when the session is not signed in.

    The boundary handler answers with a redirect to `location`; the requested
    path and the info flash have already been written to the session.
    """

    def __init__(self, location: str = "/users/signin"):
        super().__init__(
            message="Please sign in order to access your profile.",
            context={"location": location},
        )
        self.location = location


class DatabaseError(ActivityTrackerError):
    """
    Raised when a store operation fails.

    The rendered message stays generic; the underlying driver error, statement
    name and arguments go to `context` and are logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UniquenessConflictError(DatabaseError):
    """
    Raised when a write violates a UNIQUE constraint (e.g. a duplicate username).

    Subclasses DatabaseError so code that does not expect a conflict still
    treats it as a store failure.
    """

    def __init__(
        self,
        message: str = "A record with the same unique value already exists.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
