"""
Books API — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: Mock AsyncSession (repository unit tests, no real DB)
    ├── test_settings:   Settings pointing at a fresh SQLite file under tmp_path
    ├── test_app:        Application built from test_settings
    ├── test_client:     HTTPX AsyncClient with the app's lifespan running
    └── test_book:       The seeded book row, inserted before the test
"""

import os
from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Keep tests away from any real database configured in the environment
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./books_test.db"
os.environ["LOG_LEVEL"] = "WARNING"

from books_api.config import Settings  # noqa: E402
from books_api.main import create_app  # noqa: E402
from books_api.models.book import Book  # noqa: E402

SEED_BOOK: Dict[str, Any] = {
    "isbn": "0691161518",
    "amazon_url": "http://a.co/eobPtX2",
    "author": "Matthew Lane",
    "language": "english",
    "pages": 264,
    "publisher": "Princeton University Press",
    "title": "Power-Up: Unlocking the Hidden Mathematics in Video Games",
    "year": 2017,
}


@pytest.fixture
def book_data() -> Dict[str, Any]:
    """A valid request body for a book that is not in the database yet."""
    return {
        "isbn": "12345678",
        "amazon_url": "http://a.co/abcde",
        "author": "Sadie Kat",
        "language": "french",
        "pages": 999,
        "publisher": "Meow Press",
        "title": "I Want Kibble",
        "year": 2022,
    }


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_book(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = book
            result = await book_repository.get_book(mock_db_session, "0691161518")
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings for a throwaway SQLite database, one file per test."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'books_test.db'}",
        db_create_tables=True,
        log_level="WARNING",
    )


@pytest.fixture
def test_app(test_settings):
    return create_app(test_settings)


@pytest_asyncio.fixture
async def test_client(test_app):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    ASGITransport does not send lifespan events, so the lifespan context is
    entered here: it opens the database and creates the `books` table.
    """
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest_asyncio.fixture
async def test_book(test_app, test_client) -> Dict[str, Any]:
    """Inserts SEED_BOOK directly through the app's Database and returns it."""
    database = test_app.state.database
    async with database.session_factory() as session:
        session.add(Book(**SEED_BOOK))
        await session.commit()
    return dict(SEED_BOOK)
