"""
Books API — Book Repository Unit Tests
=======================================

What:  Tests for BookRepository against a mocked AsyncSession.
How:   The session's execute/commit are AsyncMocks, so every outcome of the
       store (row, no row, failure) can be forced without a database.

Test Strategy:
    ✅ Found / not found for get, update and delete
    ✅ Writes commit before returning; a failed commit is a DatabaseError
    ✅ Store failures become DatabaseError with the ISBN in context
    ✅ update never writes the payload ISBN
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from books_api.exceptions import DatabaseError, NotFoundError
from books_api.models.book import Book
from books_api.schemas.book import BookPayload
from books_api.services.book_repository import BookRepository


@pytest.fixture
def repository():
    return BookRepository()


@pytest.fixture
def payload(book_data):
    return BookPayload.model_validate(book_data)


class TestGetBook:

    @pytest.mark.asyncio
    async def test_returns_row(self, repository, mock_db_session, book_data):
        """An existing ISBN returns the ORM row as-is."""
        book = Book(**book_data)
        mock_db_session.execute.return_value.scalar_one_or_none = MagicMock(return_value=book)

        result = await repository.get_book(mock_db_session, book_data["isbn"])

        assert result is book
        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_row_raises_not_found(self, repository, mock_db_session):
        """No row means NotFoundError carrying the ISBN."""
        mock_db_session.execute.return_value.scalar_one_or_none = MagicMock(return_value=None)

        with pytest.raises(NotFoundError) as exc_info:
            await repository.get_book(mock_db_session, "12345")

        assert exc_info.value.isbn == "12345"
        assert exc_info.value.status_code == 404
        assert "12345" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_store_failure_raises_database_error(self, repository, mock_db_session):
        """Driver errors are wrapped; the original type is kept in context."""
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(DatabaseError) as exc_info:
            await repository.get_book(mock_db_session, "12345")

        assert exc_info.value.context["isbn"] == "12345"
        assert exc_info.value.context["error_type"] == "OperationalError"


class TestListBooks:

    @pytest.mark.asyncio
    async def test_returns_all_rows(self, repository, mock_db_session, book_data):
        """Every row the query yields is returned."""
        rows = [Book(**book_data)]
        scalars = MagicMock()
        scalars.all.return_value = rows
        mock_db_session.execute.return_value.scalars = MagicMock(return_value=scalars)

        assert await repository.list_books(mock_db_session) == rows

    @pytest.mark.asyncio
    async def test_store_failure(self, repository, mock_db_session):
        """Any exception from the store becomes DatabaseError."""
        mock_db_session.execute.side_effect = RuntimeError("boom")

        with pytest.raises(DatabaseError):
            await repository.list_books(mock_db_session)


class TestCreateBook:

    @pytest.mark.asyncio
    async def test_adds_and_commits(self, repository, mock_db_session, payload):
        """The new row is added and committed before create_book returns."""
        book = await repository.create_book(mock_db_session, payload)

        mock_db_session.add.assert_called_once_with(book)
        mock_db_session.commit.assert_awaited_once()
        assert book.isbn == payload.isbn
        assert book.pages == payload.pages

    @pytest.mark.asyncio
    async def test_duplicate_isbn_raises_database_error(
        self, repository, mock_db_session, payload
    ):
        """A primary key clash at commit is a generic DatabaseError."""
        mock_db_session.commit.side_effect = IntegrityError(
            "INSERT", {}, Exception("UNIQUE constraint failed: books.isbn")
        )

        with pytest.raises(DatabaseError) as exc_info:
            await repository.create_book(mock_db_session, payload)

        assert exc_info.value.status_code == 500
        assert "UNIQUE" not in exc_info.value.message
        assert exc_info.value.context["error_type"] == "IntegrityError"


class TestUpdateBook:

    @pytest.mark.asyncio
    async def test_returns_updated_row(self, repository, mock_db_session, payload, book_data):
        """The RETURNING row comes back and the change is committed."""
        book = Book(**book_data)
        mock_db_session.execute.return_value.scalar_one_or_none = MagicMock(return_value=book)

        result = await repository.update_book(mock_db_session, book_data["isbn"], payload)

        assert result is book
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_payload_isbn_is_not_written(self, repository, mock_db_session, payload):
        """The SET clause covers the seven non-key columns only."""
        mock_db_session.execute.return_value.scalar_one_or_none = MagicMock(
            return_value=MagicMock()
        )

        await repository.update_book(mock_db_session, "0691161518", payload)

        statement = mock_db_session.execute.await_args.args[0]
        sql = str(statement)
        set_clause = sql[sql.index("SET") : sql.index("WHERE")]
        assert "isbn" not in set_clause
        for column in ("amazon_url", "author", "language", "pages", "publisher", "title", "year"):
            assert column in set_clause
        assert "books.isbn = :isbn_1" in sql

    @pytest.mark.asyncio
    async def test_unknown_isbn_raises_not_found(self, repository, mock_db_session, payload):
        """No row updated means NotFoundError and nothing committed."""
        mock_db_session.execute.return_value.scalar_one_or_none = MagicMock(return_value=None)

        with pytest.raises(NotFoundError):
            await repository.update_book(mock_db_session, "12345", payload)

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commit_failure_raises_database_error(
        self, repository, mock_db_session, payload
    ):
        """A commit that fails after a successful UPDATE is a DatabaseError."""
        mock_db_session.execute.return_value.scalar_one_or_none = MagicMock(
            return_value=MagicMock()
        )
        mock_db_session.commit.side_effect = OperationalError("COMMIT", {}, Exception("gone"))

        with pytest.raises(DatabaseError) as exc_info:
            await repository.update_book(mock_db_session, "0691161518", payload)

        assert exc_info.value.context["error_type"] == "OperationalError"


class TestDeleteBook:

    @pytest.mark.asyncio
    async def test_deletes_row(self, repository, mock_db_session):
        """A deleted row is committed; delete_book returns nothing."""
        mock_db_session.execute.return_value.scalar_one_or_none = MagicMock(
            return_value="0691161518"
        )

        assert await repository.delete_book(mock_db_session, "0691161518") is None
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_isbn_raises_not_found(self, repository, mock_db_session):
        """Deleting an absent ISBN is NotFoundError."""
        mock_db_session.execute.return_value.scalar_one_or_none = MagicMock(return_value=None)

        with pytest.raises(NotFoundError):
            await repository.delete_book(mock_db_session, "12345")

        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure(self, repository, mock_db_session):
        """Driver errors during DELETE are wrapped with the ISBN."""
        mock_db_session.execute.side_effect = OperationalError("DELETE", {}, Exception("gone"))

        with pytest.raises(DatabaseError) as exc_info:
            await repository.delete_book(mock_db_session, "0691161518")

        assert exc_info.value.context["isbn"] == "0691161518"
