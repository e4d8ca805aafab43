# Services package init
"""
Books API — Services Layer
===========================

What:  Everything between the routes (HTTP) and the database (persistence).

Service Inventory:
    - book_validator:   schema check of request bodies → ordered Violations
    - error_formatter:  Violations / errors → the JSON error envelope
    - book_repository:  CRUD on the `books` table, one round trip per call
"""
