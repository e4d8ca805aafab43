# Routes package init
"""
Books API — API Routes Package
===============================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - books.py:   GET    /books           (list every book)
                  GET    /books/{isbn}    (single book)
                  POST   /books           (create)
                  PUT    /books/{isbn}    (full replacement)
                  DELETE /books/{isbn}    (delete)
    - health.py:  GET    /health          (service health check)

Routes stay thin: decode the request, call the validator and the
repository, pick the status code. Errors are raised and rendered by the
global handlers in main.py.
"""
