"""
Books API — Request Logging Middleware
=======================================

What:  One access-log line per HTTP request.
How:   Times the downstream call and logs the book operation, method, path,
       status, duration, request ID and client IP on the `books_api.access`
       logger.
When:  Runs inside RequestIDMiddleware, so the request ID is already set.

Operation names follow the repository methods:
    GET /books          → list_books     GET /books/{isbn}    → get_book
    POST /books         → create_book    PUT /books/{isbn}    → update_book
                                         DELETE /books/{isbn} → delete_book
Anything else (docs, unknown paths) is logged as `other`.

Log level follows the status code:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Request bodies are never logged.
"""

import logging
import time
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from books_api.middleware.request_id import request_id_var

logger = logging.getLogger("books_api.access")

_COLLECTION_OPERATIONS = {"GET": "list_books", "POST": "create_book"}
_ITEM_OPERATIONS = {"GET": "get_book", "PUT": "update_book", "DELETE": "delete_book"}


def classify(method: str, path: str) -> Tuple[str, Optional[str]]:
    """
    Maps a request line to (operation, isbn).

    >>> classify("PUT", "/books/0691161518")
    ('update_book', '0691161518')
    """
    parts = [part for part in path.split("/") if part]
    if not parts or parts[0] != "books":
        return "other", None
    if len(parts) == 1:
        return _COLLECTION_OPERATIONS.get(method, "other"), None
    if len(parts) == 2:
        return _ITEM_OPERATIONS.get(method, "other"), parts[1]
    return "other", None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    /health is skipped: probes hit it every few seconds.
    """

    SKIPPED_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.SKIPPED_PATHS:
            return await call_next(request)

        method = request.method
        operation, isbn = classify(method, path)
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %s %d %.1fms [%s] from %s",
            operation,
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "operation": operation,
                "isbn": isbn,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
