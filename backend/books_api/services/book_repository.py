"""
Books API — Book Repository
============================

What:  CRUD operations on the `books` table, keyed by ISBN.
How:   Each method issues exactly one statement through the request's
       AsyncSession. Writes use RETURNING so the stored row comes back in the
       same round trip. Write methods commit before returning, so a failed
       commit is a 500 and never a success response.
Who:   Called by the /books route handlers.

Error Handling Strategy:
    - No row for an ISBN            → NotFoundError (404)
    - Anything the store raises     → DatabaseError (500), original type logged
      (duplicate ISBN on create, lost connection, ...)
    There are no retries and no caching.

BookRepository is stateless. It receives the session for each call, so one
instance is shared by all requests.
"""

import logging
from typing import List

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from books_api.exceptions import DatabaseError, NotFoundError
from books_api.models.book import Book
from books_api.schemas.book import BookPayload

logger = logging.getLogger(__name__)


class BookRepository:
    """
    Data access for book records.

    Responsibilities:
        - list_books(): every row, in store order
        - get_book(): single row or NotFoundError
        - create_book(): insert a complete record
        - update_book(): replace the seven non-key columns of an existing row
        - delete_book(): remove a row or raise NotFoundError
    """

    async def list_books(self, db: AsyncSession) -> List[Book]:
        """
        Return every book.

        No ORDER BY: rows come back in whatever order the store holds them,
        which for a fresh table is insertion order.
        """
        try:
            result = await db.execute(select(Book))
            return list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing books: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve books. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_book(self, db: AsyncSession, isbn: str) -> Book:
        """
        Retrieve a single book by ISBN.

        Query plan:
            SELECT ... FROM books WHERE isbn = :isbn  → primary key lookup

        Raises:
            NotFoundError: no book with this ISBN (→ 404)
            DatabaseError: query execution failed (→ 500)
        """
        try:
            result = await db.execute(select(Book).where(Book.isbn == isbn))
            book = result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error fetching book %s: %s", isbn, str(e))
            raise DatabaseError(
                message="Could not retrieve the book. Please try again.",
                context={"isbn": isbn, "error_type": type(e).__name__},
            )

        if book is None:
            raise NotFoundError(isbn=isbn)
        return book

    async def create_book(self, db: AsyncSession, payload: BookPayload) -> Book:
        """
        Insert a new book.

        The caller supplies the ISBN; nothing is generated server-side.

        Raises:
            DatabaseError: insert failed, including a duplicate ISBN (→ 500)
        """
        book = Book(**payload.model_dump())
        try:
            db.add(book)
            # Commit here, not in get_db_session: its post-yield code may run
            # after the response has already been sent
            await db.commit()
        except Exception as e:
            logger.error(
                "Database error creating book %s: %s", payload.isbn, str(e), exc_info=True
            )
            raise DatabaseError(
                message="Could not create the book. Please try again.",
                context={"isbn": payload.isbn, "error_type": type(e).__name__},
            )

        logger.info("Book created: %s", book.isbn)
        return book

    async def update_book(self, db: AsyncSession, isbn: str, payload: BookPayload) -> Book:
        """
        Replace every non-key column of the book at `isbn`.

        The path ISBN locates the row. `payload.isbn` is validated upstream
        but never written: a row's ISBN does not change.

        Query plan:
            UPDATE books SET amazon_url = ..., ..., year = ...
            WHERE isbn = :isbn RETURNING *

        Raises:
            NotFoundError: no book with this ISBN (→ 404)
            DatabaseError: update failed (→ 500)
        """
        values = payload.model_dump(exclude={"isbn"})
        try:
            result = await db.execute(
                update(Book).where(Book.isbn == isbn).values(**values).returning(Book)
            )
            book = result.scalar_one_or_none()
            if book is not None:
                await db.commit()
        except Exception as e:
            logger.error("Database error updating book %s: %s", isbn, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the book. Please try again.",
                context={"isbn": isbn, "error_type": type(e).__name__},
            )

        if book is None:
            raise NotFoundError(isbn=isbn)
        logger.info("Book updated: %s", isbn)
        return book

    async def delete_book(self, db: AsyncSession, isbn: str) -> None:
        """
        Delete the book at `isbn`.

        Raises:
            NotFoundError: no book with this ISBN (→ 404); a second delete of
                the same ISBN lands here
            DatabaseError: delete failed (→ 500)
        """
        try:
            result = await db.execute(
                delete(Book).where(Book.isbn == isbn).returning(Book.isbn)
            )
            deleted = result.scalar_one_or_none()
            if deleted is not None:
                await db.commit()
        except Exception as e:
            logger.error("Database error deleting book %s: %s", isbn, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the book. Please try again.",
                context={"isbn": isbn, "error_type": type(e).__name__},
            )

        if deleted is None:
            raise NotFoundError(isbn=isbn)
        logger.info("Book deleted: %s", isbn)


# ── Singleton Instance ────────────────────────────────────────────────────
book_repository = BookRepository()
