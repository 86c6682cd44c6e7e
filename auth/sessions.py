"""
auth/sessions.py -- The two session strategies and the manager that uses them.

Two mutually exclusive ways of proving identity:

  TokenSession   signed HS256 JWT {id, email, exp} in the httpOnly "token"
                 cookie (or an Authorization: Bearer header). 7-day lifetime.
  CookieSession  the plaintext email in the "user_email" cookie (or an
                 X-User-Email header). No signature, no expiry.

Exactly one strategy is built per process, by build_session_strategy(), from
Settings.jwt_secret. SessionManager receives it at construction and never
swaps it, so issuing and resolving always agree on the mode.

Both strategies clear BOTH cookies on logout. A browser that still holds a
cookie from a previous deployment in the other mode is logged out cleanly.

Layer rule: no imports from api/, analysis/, or client/. fastapi is used only
for the Request/Response types passed in by route handlers.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from fastapi import Request, Response
from sqlalchemy.exc import IntegrityError

from auth.errors import AuthError, ConflictError, NotFoundError, UnauthenticatedError, ValidationError
from auth.models import User
from auth.store import UserStore
from auth.tokens import (
    TOKEN_LIFETIME_SECONDS,
    authenticate_user,
    create_access_token,
    decode_access_token,
    hash_password,
)
from core.config import Settings

logger = logging.getLogger("medai.auth")

TOKEN_COOKIE = "token"
EMAIL_COOKIE = "user_email"
EMAIL_HEADER = "X-User-Email"


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class SessionStrategy(ABC):
    """Common interface for issuing, resolving, and clearing a session."""

    mode: str = ""

    @abstractmethod
    def issue(self, response: Response, user: User) -> None:
        """Attach a session for user to the outgoing response."""

    @abstractmethod
    def resolve(self, request: Request, store: UserStore) -> User:
        """Return the user behind the request's session.

        Raises UnauthenticatedError when no usable session is present and
        NotFoundError when the session names a user that no longer exists.
        """

    def clear(self, response: Response) -> None:
        """Expire both session cookies. Never raises."""
        response.delete_cookie(TOKEN_COOKIE, samesite="none", secure=True)
        response.delete_cookie(EMAIL_COOKIE)


class TokenSession(SessionStrategy):
    """Signed-token mode. Selected when JWT_SECRET is configured."""

    mode = "token"

    def __init__(self, secret: str, expire_seconds: int = TOKEN_LIFETIME_SECONDS) -> None:
        if not secret:
            raise ValueError("TokenSession requires a signing secret.")
        self._secret = secret
        self.expire_seconds = expire_seconds

    def issue(self, response: Response, user: User) -> None:
        token = create_access_token(user.id, user.email, self._secret, self.expire_seconds)
        # SameSite=None lets the frontend on another origin send the cookie;
        # browsers only accept that together with Secure.
        response.set_cookie(
            TOKEN_COOKIE,
            value=token,
            httponly=True,
            secure=True,
            samesite="none",
            max_age=self.expire_seconds,
        )

    def resolve(self, request: Request, store: UserStore) -> User:
        token = request.cookies.get(TOKEN_COOKIE)
        if not token:
            auth_header = request.headers.get("Authorization", "")
            if auth_header.startswith("Bearer "):
                token = auth_header[7:]
        if not token:
            raise UnauthenticatedError()

        payload = decode_access_token(token, self._secret)
        if payload is None:
            raise UnauthenticatedError("Invalid or expired token")

        user = store.get_by_id(payload["id"])
        if user is None:
            raise NotFoundError()
        return user


class CookieSession(SessionStrategy):
    """Plain-cookie mode. Selected when no JWT_SECRET is configured.

    The cookie is readable by frontend JavaScript and carries no signature:
    anyone who can set a cookie or header can claim any email. Use token mode
    for anything beyond local development.
    """

    mode = "cookie"

    def issue(self, response: Response, user: User) -> None:
        response.set_cookie(EMAIL_COOKIE, value=user.email, httponly=False, samesite="lax")

    def resolve(self, request: Request, store: UserStore) -> User:
        email = request.cookies.get(EMAIL_COOKIE) or request.headers.get(EMAIL_HEADER)
        if not email:
            raise UnauthenticatedError()

        user = store.get_by_email(email)
        if user is None:
            raise NotFoundError()
        return user


def build_session_strategy(settings: Settings) -> SessionStrategy:
    """Pick the session strategy for this process from settings."""
    if settings.use_jwt:
        return TokenSession(settings.jwt_secret, settings.token_expire_seconds)
    return CookieSession()


# ---------------------------------------------------------------------------
# Manager
# ---------------------------------------------------------------------------


class SessionManager:
    """Registration, login, identity resolution, and logout over one strategy.

    Usage:
        manager = SessionManager(UserStore(), build_session_strategy(get_settings()))
        summary = manager.login(response, "a@x.com", "secret")
        user = manager.resolve_identity(request)
    """

    def __init__(self, store: UserStore, strategy: SessionStrategy) -> None:
        self.store = store
        self._strategy = strategy

    @property
    def mode(self) -> str:
        return self._strategy.mode

    def register(
        self,
        response: Response,
        *,
        email: str | None,
        password: str | None,
        full_name: str | None = None,
        doctor_id: str | None = None,
        hospital_name: str | None = None,
        area: str | None = None,
        profile_picture: str | None = None,
    ) -> dict:
        """Create an account and sign the new user in.

        The existence check gives the common duplicate case a clean 409; the
        UNIQUE constraint on users.email catches the concurrent case.
        """
        if not email or not password:
            raise ValidationError()

        if self.store.get_by_email(email) is not None:
            raise ConflictError()

        user = User(
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            doctor_id=doctor_id,
            hospital_name=hospital_name,
            area=area,
            profile_picture=profile_picture,
        )
        try:
            user.id = self.store.create_user(user)
        except IntegrityError as exc:
            raise ConflictError() from exc

        logger.info("Registered user id=%s", user.id)
        self._strategy.issue(response, user)
        return user.to_summary()

    def login(self, response: Response, email: str | None, password: str | None) -> dict:
        """Verify credentials and issue a session.

        Unknown email and wrong password raise the same AuthError.
        """
        user = authenticate_user(self.store, email or "", password or "")
        if user is None:
            raise AuthError()
        self._strategy.issue(response, user)
        return user.to_summary()

    def resolve_identity(self, request: Request) -> User:
        return self._strategy.resolve(request, self.store)

    def get_profile(self, request: Request) -> dict:
        return self.resolve_identity(request).to_profile()

    def logout(self, response: Response) -> dict:
        self._strategy.clear(response)
        return {"ok": True}
