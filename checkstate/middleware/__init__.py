"""
Checkstate: Middleware Package
================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS, when configured] → Route Handler

    - Request ID runs first so the access log line carries the ID.
    - Logging captures status and duration on the way back out.
"""
