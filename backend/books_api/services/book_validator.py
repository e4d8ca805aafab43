"""
Books API — Book Schema Validator
==================================

What:  Checks a decoded JSON body against the book schema and reports every
       non-conformance as a typed `Violation`.
How:   The body is validated by the strict `BookPayload` model. Pydantic's
       error list is folded into one violation per failing field, then
       ordered by the fixed field sequence below.
Who:   Called by the create and update route handlers before any store access.

Violation ordering:
    1. every missing field, in BOOK_FIELDS order
    2. every wrongly-typed field, in BOOK_FIELDS order

    A body with `publisher` absent and bad `author`/`pages` therefore reports
    publisher first, then author, then pages. Error-body equality in clients
    and tests depends on this order.

Rendering violations to text is the error formatter's job; nothing in this
module produces user-facing strings.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from books_api.exceptions import ValidationError
from books_api.schemas.book import BookPayload

# Declaration order of the book fields. Also the column order of the table.
BOOK_FIELDS: Tuple[str, ...] = (
    "isbn",
    "amazon_url",
    "author",
    "language",
    "pages",
    "publisher",
    "title",
    "year",
)

# JSON type name expected for each field
FIELD_TYPES: Dict[str, str] = {
    "isbn": "string",
    "amazon_url": "string",
    "author": "string",
    "language": "string",
    "pages": "integer",
    "publisher": "string",
    "title": "string",
    "year": "integer",
}


class ViolationKind(str, enum.Enum):
    MISSING = "missing"
    TYPE = "type"


@dataclass(frozen=True)
class Violation:
    """
    One schema non-conformance.

    Attributes:
        kind:     MISSING (field absent) or TYPE (present with the wrong type)
        field:    Offending field name; None when the body itself is not an object
        expected: JSON type name the field (or body) should have; None for MISSING
    """

    kind: ViolationKind
    field: Optional[str]
    expected: Optional[str] = None

    @classmethod
    def missing(cls, field: str) -> "Violation":
        return cls(kind=ViolationKind.MISSING, field=field)

    @classmethod
    def wrong_type(cls, field: Optional[str], expected: str) -> "Violation":
        return cls(kind=ViolationKind.TYPE, field=field, expected=expected)


def _fold_errors(exc: PydanticValidationError) -> Dict[str, ViolationKind]:
    """Reduces pydantic's error list to one violation kind per top-level field."""
    failed: Dict[str, ViolationKind] = {}
    for error in exc.errors():
        loc = error.get("loc") or ()
        # Why skip: errors outside the eight fields (e.g. model-level) have no property to name
        if not loc or loc[0] not in FIELD_TYPES:
            continue
        field = str(loc[0])
        kind = ViolationKind.MISSING if error["type"] == "missing" else ViolationKind.TYPE
        # A field is either missing or present-and-wrong, never both
        failed.setdefault(field, kind)
    return failed


def _check(candidate: Any) -> Tuple[Optional[BookPayload], List[Violation]]:
    # Why early: a list or scalar has no properties to check, only its own type
    if not isinstance(candidate, dict):
        return None, [Violation.wrong_type(None, "object")]

    try:
        # Why model_validate: the body arrives already decoded by the route
        book = BookPayload.model_validate(candidate)
    except PydanticValidationError as exc:
        failed = _fold_errors(exc)
    else:
        return book, []

    # Why two passes: all missing fields are reported before any wrong type
    missing = [
        Violation.missing(field)
        for field in BOOK_FIELDS
        if failed.get(field) is ViolationKind.MISSING
    ]
    wrong_types = [
        Violation.wrong_type(field, FIELD_TYPES[field])
        for field in BOOK_FIELDS
        if failed.get(field) is ViolationKind.TYPE
    ]
    return None, missing + wrong_types


def validate_book(candidate: Any) -> List[Violation]:
    """
    Validate a decoded JSON value against the book schema.

    Args:
        candidate: Anything `json.loads` can return

    Returns:
        Ordered violations; an empty list means the candidate is a valid book.
        Unknown keys are ignored and never produce violations.
    """
    return _check(candidate)[1]


def parse_book(candidate: Any) -> BookPayload:
    """
    Validate and convert in one step.

    Raises:
        ValidationError: carrying every violation, in reporting order
    """
    book, violations = _check(candidate)
    if violations:
        raise ValidationError(violations)
    return book
