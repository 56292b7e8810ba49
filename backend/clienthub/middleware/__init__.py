# Middleware package init
"""
ClientHub Backend - Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID for log lines, echoed as X-Request-ID
    2. Logging: method, path, status and duration once the response is ready
    3. GZip / CORS: FastAPI's stock middleware (CORS also answers preflight)

    Responses travel back through the same chain in reverse.
"""
