"""
Books API — Pydantic Request/Response Schemas
==============================================

What:  Pydantic models defining the API contract.
How:   `BookPayload` is the strict record type the validator checks request
       bodies against. The response models wrap ORM rows for serialization
       and describe the error envelope for the OpenAPI docs.
Who:   Used by the validator, the error formatter, and the route handlers.

Schemas are separate from the SQLAlchemy model: the request contract
(strict JSON types, unknown keys ignored) is not the table definition.
"""

from typing import Any, List, Union

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class BookPayload(BaseModel):
    """
    The body accepted by POST /books and PUT /books/{isbn}.

    Strict mode: "999" is not an integer and 54 is not a string. The one
    conversion is a float with no fractional part (999.0) to an integer,
    the JSON Schema meaning of "integer".

    Field declaration order here is the order violations are reported in
    (see services/book_validator.BOOK_FIELDS).
    """

    isbn: str
    amazon_url: str
    author: str
    language: str
    pages: int
    publisher: str
    title: str
    year: int

    model_config = {"strict": True, "extra": "ignore"}

    @field_validator("pages", "year", mode="before")
    @classmethod
    def integral_float_to_int(cls, v: Any) -> Any:
        """999.0 becomes 999; 999.5, "999" and booleans fall through to the strict check."""
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class BookOut(BaseModel):
    """A stored book. Always carries all eight fields."""

    isbn: str
    amazon_url: str
    author: str
    language: str
    pages: int
    publisher: str
    title: str
    year: int

    model_config = {"from_attributes": True}


class BookResponse(BaseModel):
    """Returned by GET/POST/PUT on a single book."""
    book: BookOut


class BookListResponse(BaseModel):
    """Returned by GET /books, in store order."""
    books: List[BookOut]


class DeleteResponse(BaseModel):
    message: str = Field(default="Book deleted")


# ══════════════════════════════════════════════════════════════════════════
# Error Envelope
# ══════════════════════════════════════════════════════════════════════════


class ErrorDetail(BaseModel):
    message: Union[List[str], str] = Field(description="Violations (400) or error description")
    status: int = Field(description="HTTP status code, repeated from the response line")


class ErrorResponse(BaseModel):
    """
    Standard error envelope. `message` appears twice, once nested under
    `error` and once at the top level, and both copies are identical.

    Example (400):
        {
            "error": {
                "message": [
                    "instance.language is not of a type(s) string",
                    "instance.pages is not of a type(s) integer"
                ],
                "status": 400
            },
            "message": [
                "instance.language is not of a type(s) string",
                "instance.pages is not of a type(s) integer"
            ]
        }
    """
    error: ErrorDetail
    message: Union[List[str], str]


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
