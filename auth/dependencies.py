"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Identity resolution is delegated to the SessionManager stored on app.state
by the API lifespan. Which cookie or header is read depends on the session
mode chosen at startup (see auth/sessions.py):

  token mode:  "token" cookie, then Authorization: Bearer <token>
  cookie mode: "user_email" cookie, then X-User-Email

get_current_user() raises UnauthenticatedError / NotFoundError; the API
layer's SessionError handler turns those into 401 / 404 JSON responses.

Layer rule: no imports from api/, analysis/, or client/.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import User
from auth.sessions import SessionManager


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_current_user(request: Request) -> User:
    """Require an authenticated session.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: User = Depends(get_current_user)): ...
    """
    return get_session_manager(request).resolve_identity(request)
