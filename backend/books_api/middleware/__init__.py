# Middleware package init
"""
Books API — Middleware Package
===============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: accept or generate a correlation ID
    2. Logging: one access line per request, tagged with that ID
    3. CORS: FastAPI's CORSMiddleware (handles preflight)
"""
