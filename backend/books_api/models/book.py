"""
Books API — Book SQLAlchemy Model
==================================

What:  ORM model representing the `books` table.
How:   Inherits from the shared DeclarativeBase; `Database.create_tables`
       creates the table from this mapping at startup.
Who:   Used by BookRepository for CRUD operations.

Table Design:
    - isbn: Natural primary key supplied by the client; never generated,
      never changed by an update
    - every other column is NOT NULL: the API only ever persists complete
      records
"""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from books_api.database import Base


class Book(Base):
    """
    A book row.

    Lifecycle:
        1. Inserted by POST /books with a caller-supplied ISBN
        2. Replaced field-by-field (all seven non-key columns) by PUT
        3. Removed by DELETE; there is no soft delete
    """

    __tablename__ = "books"

    isbn: Mapped[str] = mapped_column(Text, primary_key=True)
    amazon_url: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(Text, nullable=False)
    language: Mapped[str] = mapped_column(Text, nullable=False)
    pages: Mapped[int] = mapped_column(Integer, nullable=False)
    publisher: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<Book(isbn='{self.isbn}', title='{self.title}')>"
