"""
Books API — Database Engine & Session Management
=================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   A `Database` object owns the engine and session factory. It is created
       by the application lifespan, stored on `app.state.database`, and
       reached by route handlers through the `get_db_session` dependency.
       Repository writes commit themselves; the dependency rolls back
       whatever is left open when a handler fails.
Who:   main.py (lifecycle), route handlers (sessions), health check (ping).
When:  Engine is created at startup and disposed at shutdown; sessions are
       created per request.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

SQLite (tests, local experiments) gets no pool arguments; SQLAlchemy picks
the pool class for the aiosqlite driver itself.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from books_api.config import Settings

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Models register their tables on `Base.metadata`, which `Database.create_tables`
    uses at startup.
    """
    pass


class Database:
    """
    Process-wide handle on the persistent store.

    One instance per running application. Holds the connection pool
    (through the engine) and hands out one `AsyncSession` per request.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.engine: AsyncEngine = create_async_engine(
            settings.database_url,
            **self._engine_options(settings),
        )
        # expire_on_commit=False: returned records stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @staticmethod
    def _engine_options(settings: Settings) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            # Echo SQL queries only in DEBUG mode
            "echo": settings.log_level == "DEBUG",
        }
        if not settings.is_sqlite:
            options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )
        return options

    async def create_tables(self) -> None:
        """
        What:  Creates every table registered on `Base.metadata` if absent.
        When:  Startup, when `db_create_tables` is enabled.
        """
        # Registers the `books` table on Base.metadata
        from books_api.models import book  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured: %s", ", ".join(Base.metadata.tables))

    async def ping(self) -> None:
        """Runs `SELECT 1`; raises whatever the driver raises when unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """
        What:  Gracefully closes all connections in the pool.
        When:  Called during application shutdown (lifespan handler).
        """
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's Database
        2. Yields it to the route handler (the handler performs queries)
        3. On error: rolls back the transaction and re-raises
        4. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/books")
        async def list_books(db: AsyncSession = Depends(get_db_session)):
            ...

    Raises:
        Any exception from the handler, after rollback. The global
        exception handlers turn it into a response.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            # Roll back on ANY failure, including non-DB errors raised after a write
            await session.rollback()
            raise
        finally:
            await session.close()
