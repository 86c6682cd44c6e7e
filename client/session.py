"""
client/session.py -- Client-side session store for the MedAI API.

SessionStore is the single source of truth for "who is logged in" on the
client. It talks to the API through one requests.Session, whose cookie jar
carries the session cookie between calls the way a browser does for
credentialed fetches.

State:
  Unknown          loading=True,  user=None   (only before the first check settles)
  Authenticated    loading=False, user=dict
  Unauthenticated  loading=False, user=None

The constructor runs check_status() once, so a new store always ends in
Authenticated or Unauthenticated -- transport failures included.

UI concerns are injected, not looked up:
  notify(title, description, variant)  toast-style feedback; variant is
                                       "default" or "destructive"
  navigate(path)                       route change after logout

Both default to logging so the store works headless (scripts, tests).

Concurrency: calls are not de-duplicated and cannot be cancelled. If two
logins are in flight, the last one to return wins; callers disable their
controls while `loading` is True.

Layer rule: no imports from api/, auth/, or analysis/. The client only knows
the HTTP contract.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from core.config import get_settings

logger = logging.getLogger("medai.client")

Notifier = Callable[[str, str, str], None]
Navigator = Callable[[str], None]

_TIMEOUT = 10


@dataclass
class AuthResult:
    """Outcome of login/register. status is the HTTP code when one was received."""

    success: bool
    error: Optional[str] = None
    status: Optional[int] = None


def _log_notification(title: str, description: str, variant: str = "default") -> None:
    level = logging.WARNING if variant == "destructive" else logging.INFO
    logger.log(level, "%s: %s", title, description)


def _log_navigation(path: str) -> None:
    logger.info("Navigate to %s", path)


def _json_or_empty(resp: requests.Response) -> dict:
    """Parse a JSON object body, or return {} for empty/non-JSON/non-object bodies."""
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class SessionStore:
    """Holds the authenticated identity and exposes check/login/register/logout.

    Usage:
        store = SessionStore(notify=toast, navigate=router.push)
        if not store.is_authenticated:
            result = store.login("a@x.com", "secret")
            if not result.success:
                show_inline_error(result.error)
        ...
        store.logout()
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        http: Optional[requests.Session] = None,
        notify: Notifier = _log_notification,
        navigate: Navigator = _log_navigation,
        check_on_init: bool = True,
    ) -> None:
        self.api_base = (api_base or "").strip().rstrip("/") or get_settings().resolved_api_url.rstrip("/")
        self.http = http or requests.Session()
        self._notify = notify
        self._navigate = navigate

        self.user: Optional[dict[str, Any]] = None
        self.is_authenticated: bool = False
        self.loading: bool = True

        if check_on_init:
            self.check_status()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.api_base}{path}"

    def _set_user(self, user: Optional[dict[str, Any]]) -> None:
        self.user = user
        self.is_authenticated = user is not None

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def check_status(self) -> None:
        """Sync local state with GET /api/auth/me.

        Never raises. Any status other than a 2xx carrying a user -- and any
        transport failure -- leaves the store Unauthenticated.
        """
        try:
            resp = self.http.get(self._url("/api/auth/me"), timeout=_TIMEOUT)
            if resp.ok:
                self._set_user(_json_or_empty(resp).get("user") or None)
            else:
                if resp.status_code not in (401, 403):
                    logger.warning("Auth check returned HTTP %d", resp.status_code)
                self._set_user(None)
        except requests.RequestException as e:
            logger.error("Auth check failed: %s", e)
            self._set_user(None)
        finally:
            self.loading = False

    def login(self, email: str, password: str) -> AuthResult:
        """POST /api/auth/login.

        Ordinary 4xx failures are returned for inline rendering without a
        toast; only 5xx and transport errors notify.
        """
        self.loading = True
        try:
            resp = self.http.post(
                self._url("/api/auth/login"),
                json={"email": email, "password": password},
                timeout=_TIMEOUT,
            )
            data = _json_or_empty(resp)

            if resp.ok and data.get("user"):
                self._set_user(data["user"])
                self._notify("Welcome back!", "Successfully logged in", "default")
                return AuthResult(success=True, status=resp.status_code)

            if resp.status_code >= 500:
                self._notify("Server error", data.get("message") or "Please try again later", "destructive")
            fallback = "Invalid email or password" if resp.status_code == 401 else "Login failed"
            return AuthResult(success=False, error=data.get("message") or fallback, status=resp.status_code)
        except requests.RequestException as e:
            logger.error("Login request failed: %s", e)
            self._notify("Error", "An unexpected error occurred", "destructive")
            return AuthResult(success=False, error=str(e))
        finally:
            self.loading = False

    def register(self, fields: dict[str, Any]) -> AuthResult:
        """POST /api/auth/register. Does not sign the user in locally.

        fields uses the API's camelCase keys: fullName, doctorId, email,
        password, hospitalName, area.
        """
        self.loading = True
        try:
            resp = self.http.post(self._url("/api/auth/register"), json=fields, timeout=_TIMEOUT)
            data = _json_or_empty(resp)

            if resp.ok:
                self._notify("Success!", "Account created successfully. Please sign in.", "default")
                return AuthResult(success=True, status=resp.status_code)

            message = data.get("message")
            self._notify("Registration failed", message or "Could not create account", "destructive")
            return AuthResult(success=False, error=message, status=resp.status_code)
        except requests.RequestException as e:
            logger.error("Register request failed: %s", e)
            self._notify("Error", "An unexpected error occurred", "destructive")
            return AuthResult(success=False, error=str(e))
        finally:
            self.loading = False

    def logout(self) -> None:
        """POST /api/auth/logout, then clear local state no matter what happened."""
        try:
            self.http.post(self._url("/api/auth/logout"), timeout=_TIMEOUT)
        except requests.RequestException as e:
            logger.error("Logout error: %s", e)
        finally:
            self._set_user(None)
            self.http.cookies.clear()
            self._navigate("/login")
            self._notify("Logged out", "You have been successfully logged out", "default")
