"""
Books API — Error Envelope Formatter
=====================================

What:  Turns violations (and other application errors) into the error envelope.
Who:   The global exception handlers in main.py.

Envelope:
    {
        "error": {"message": <message>, "status": <status>},
        "message": <message>
    }

Both copies of the message are identical, including order.
"""

from typing import Any, Dict, List, Sequence, Union

from books_api.schemas.book import ErrorDetail, ErrorResponse
from books_api.services.book_validator import Violation, ViolationKind


def render_violation(violation: Violation) -> str:
    """
    Render one violation in the wire format.

        MISSING                → instance requires property "title"
        TYPE on a field        → instance.pages is not of a type(s) integer
        TYPE on the whole body → instance is not of a type(s) object
    """
    if violation.kind is ViolationKind.MISSING:
        return f'instance requires property "{violation.field}"'
    target = "instance" if violation.field is None else f"instance.{violation.field}"
    return f"{target} is not of a type(s) {violation.expected}"


def render_violations(violations: Sequence[Violation]) -> List[str]:
    return [render_violation(v) for v in violations]


def format_error(message: Union[str, List[str]], status: int) -> Dict[str, Any]:
    """Build the envelope for any message and status."""
    envelope = ErrorResponse(
        error=ErrorDetail(message=message, status=status),
        message=message,
    )
    return envelope.model_dump()


def format_violations(violations: Sequence[Violation]) -> Dict[str, Any]:
    """Build the 400 envelope for a failed schema check."""
    return format_error(render_violations(violations), status=400)
