"""
Books API — Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for the request pipeline.
How:   Each exception carries a message, an HTTP status, and an optional
       context dict. Global exception handlers (registered in main.py) render
       them through the error formatter into the standard envelope.
Who:   Raised by the validator boundary, the repository, and the routes.

Exception Hierarchy:
    BooksApiError (base)           → 500
    ├── ValidationError            → 400 Bad Request (body fails the book schema)
    ├── BadRequestError            → 400 Bad Request (body is not JSON)
    ├── NotFoundError              → 404 Not Found (no row for the ISBN)
    └── DatabaseError              → 500 Internal Server Error (store failure)

Duplicate ISBNs and lost connections are both DatabaseError: the store
reports them and the API does not distinguish between them.
"""

from typing import Any, Dict, List, Optional


class BooksApiError(Exception):
    """
    Base exception for all Books API errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        status_code:  HTTP status written into the response and the envelope
        context:      Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(str(self.message))


class ValidationError(BooksApiError):
    """
    Raised when a request body does not satisfy the book schema.

    HTTP: 400 Bad Request

    `violations` keeps the typed descriptors in validator order. They are
    rendered to strings by the error formatter, not here.

    Example response:
        {
            "error": {"message": ["instance requires property \"title\""], "status": 400},
            "message": ["instance requires property \"title\""]
        }
    """

    status_code = 400

    def __init__(
        self,
        violations: List[Any],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.violations = list(violations)
        super().__init__(
            message=f"Request body failed validation ({len(self.violations)} violation(s))",
            context=context,
        )


class BadRequestError(BooksApiError):
    """
    Raised when the request body cannot be decoded as JSON.

    HTTP: 400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Request body is not valid JSON",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BooksApiError):
    """
    Raised when no book row exists for the requested ISBN.

    HTTP: 404 Not Found

    SQLAlchemy returns None (or zero affected rows) for missing records; the
    repository converts that into this exception.
    """

    status_code = 404

    def __init__(
        self,
        isbn: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["isbn"] = isbn
        super().__init__(message=f"There is no book with isbn '{isbn}'", context=ctx)
        self.isbn = isbn


class DatabaseError(BooksApiError):
    """
    Raised when a store operation fails.

    HTTP: 500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. The original
        exception type and ISBN are kept in `context` and logged server-side.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
