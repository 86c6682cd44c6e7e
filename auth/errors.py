"""
auth/errors.py -- Exception taxonomy for session and identity failures.

Every exception carries the HTTP status it maps to and the message the client
sees. The API layer registers one handler for SessionError and turns any
subclass into a {"message": ...} JSON body, so route code only raises.

Layer rule: no imports from api/, analysis/, or client/. Nothing here depends
on FastAPI -- the status code is plain data.
"""

from __future__ import annotations


class SessionError(Exception):
    """Base class. Subclasses set status_code and a default message."""

    status_code: int = 500
    default_message: str = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SessionError):
    """A required request field is missing or empty."""

    status_code = 400
    default_message = "Email and password are required"


class ConflictError(SessionError):
    """The identity being registered already exists."""

    status_code = 409
    default_message = "User already exists"


class AuthError(SessionError):
    """Bad credentials. The message never says which field was wrong."""

    status_code = 401
    default_message = "Invalid credentials"


class UnauthenticatedError(SessionError):
    """No session on the request, or the session failed verification."""

    status_code = 401
    default_message = "Not authenticated"


class NotFoundError(SessionError):
    """The session is valid but the user behind it no longer exists."""

    status_code = 404
    default_message = "User not found"


class ServerError(SessionError):
    status_code = 500
    default_message = "Server error"
