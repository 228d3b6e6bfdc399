"""
Checkstate: FastAPI Dependencies
==================================

What:  Resolves per-application objects for route handlers.
How:   create_app() stores the CheckStore on app.state; get_store reads it
       back through the incoming request, so each app instance (production
       or test) uses the store built from its own Settings.
"""

from fastapi import Request

from checkstate.services.state_store import CheckStore


def get_store(request: Request) -> CheckStore:
    """FastAPI dependency returning the store bound to this application."""
    return request.app.state.store
