"""
Books API — Book Route Handlers
================================

What:  GET/POST /books and GET/PUT/DELETE /books/{isbn}.
How:   Decode the body, run the schema validator (create/update), delegate to
       BookRepository, wrap the result in the response model.
Who:   Any HTTP client of the books store.

Ordering guarantee:
    Create and update validate the body before the repository is touched.
    An invalid PUT to a nonexistent ISBN is a 400, never a 404.

Failures are raised, not returned: ValidationError (400), NotFoundError (404)
and DatabaseError (500) are turned into envelopes by the handlers in main.py.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from books_api.database import get_db_session
from books_api.exceptions import BadRequestError
from books_api.schemas.book import (
    BookListResponse,
    BookOut,
    BookResponse,
    DeleteResponse,
    ErrorResponse,
)
from books_api.services.book_repository import book_repository
from books_api.services.book_validator import parse_book

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["Books"])


async def read_json_body(request: Request) -> Any:
    """
    Dependency returning the decoded JSON body, unvalidated.

    The body is not declared as a pydantic parameter: FastAPI would answer
    schema failures itself with a 422, and this API reports them as a 400
    envelope. An empty body decodes to `{}` so that every field is
    reported missing.

    Raises:
        BadRequestError: the body is not valid JSON (→ 400)
    """
    raw = await request.body()
    if not raw.strip():
        # Why {}: every field is then reported missing, in order
        return {}
    # Why ValueError: json.JSONDecodeError and UnicodeDecodeError both subclass it
    try:
        return await request.json()
    except ValueError:
        logger.warning("Rejected request body that is not valid JSON (%d bytes)", len(raw))
        raise BadRequestError()


@router.get(
    "",
    response_model=BookListResponse,
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="List all books",
)
async def list_books(db: AsyncSession = Depends(get_db_session)) -> BookListResponse:
    # Why no sort: rows come back in store order
    books = await book_repository.list_books(db)
    return BookListResponse(books=[BookOut.model_validate(book) for book in books])


@router.get(
    "/{isbn}",
    response_model=BookResponse,
    responses={
        404: {"description": "No book with this ISBN", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a single book by ISBN",
)
async def get_book(isbn: str, db: AsyncSession = Depends(get_db_session)) -> BookResponse:
    book = await book_repository.get_book(db, isbn)
    return BookResponse(book=BookOut.model_validate(book))


@router.post(
    "",
    status_code=201,
    response_model=BookResponse,
    responses={
        400: {"description": "Body fails the book schema", "model": ErrorResponse},
        500: {"description": "Server error, including a duplicate ISBN", "model": ErrorResponse},
    },
    summary="Create a book",
    description="All eight fields are required. The ISBN is supplied by the caller.",
)
async def create_book(
    body: Any = Depends(read_json_body),
    db: AsyncSession = Depends(get_db_session),
) -> BookResponse:
    """
    Create a book.

    Returns:
        BookResponse (HTTP 201) echoing the stored record.

    Error responses (handled by global exception handlers):
        HTTP 400: missing or wrongly-typed fields (ValidationError)
        HTTP 500: duplicate ISBN or store failure (DatabaseError)
    """
    # Why first: an invalid body must never reach the store
    payload = parse_book(body)
    book = await book_repository.create_book(db, payload)
    return BookResponse(book=BookOut.model_validate(book))


@router.put(
    "/{isbn}",
    response_model=BookResponse,
    responses={
        400: {"description": "Body fails the book schema", "model": ErrorResponse},
        404: {"description": "No book with this ISBN", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Replace a book",
    description=(
        "Full replacement: all eight fields are required, including `isbn`. "
        "The ISBN in the path identifies the book and is never changed."
    ),
)
async def update_book(
    isbn: str,
    body: Any = Depends(read_json_body),
    db: AsyncSession = Depends(get_db_session),
) -> BookResponse:
    """
    Replace every field of a book except its ISBN.

    Validation runs first, so a bad body on an unknown ISBN is a 400.
    """
    # Why before the lookup: a bad body on an unknown ISBN is a 400, not a 404
    payload = parse_book(body)
    book = await book_repository.update_book(db, isbn, payload)
    return BookResponse(book=BookOut.model_validate(book))


@router.delete(
    "/{isbn}",
    response_model=DeleteResponse,
    responses={
        404: {"description": "No book with this ISBN", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a book",
)
async def delete_book(isbn: str, db: AsyncSession = Depends(get_db_session)) -> DeleteResponse:
    await book_repository.delete_book(db, isbn)
    return DeleteResponse(message="Book deleted")
