"""
Books API — Application Package Initializer
============================================

What: Marks the `books_api` directory as a Python package.
Who:  Used by uvicorn (`books_api.main:app`), pytest, and `python -m books_api`.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← status codes, request bodies
    ├─────────────────────────────────────┤
    │   Services (Validation, Repository) │  ← schema checks, CRUD, envelopes
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine + sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
