"""
auth/tokens.py -- JWT and password hashing utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with the configured
       JWT_SECRET and carry the user id, email, and expiry. Verification
       returns None on any failure -- the session layer turns that into
       UnauthenticatedError.

  Passwords: bcrypt with a cost factor of 10. The _DUMMY_HASH constant
       enables timing equalization in authenticate_user() so response time
       does not reveal whether an email is registered.

Unlike the rest of the auth package, nothing here reads settings: the
signing secret is passed in by TokenSession, which received it once at
startup. That keeps the mode decision in one place.

Layer rule: no imports from api/, analysis/, or client/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("medai.auth")

ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10
TOKEN_LIFETIME_SECONDS = 7 * 24 * 60 * 60

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def _password_bytes(plain: str) -> bytes:
    # bcrypt only reads the first 72 bytes; recent releases reject longer input.
    return plain.encode("utf-8")[:72]


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password."""
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("medai_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(
    user_id: int,
    email: str,
    secret: str,
    expire_seconds: int = TOKEN_LIFETIME_SECONDS,
    now: datetime | None = None,
) -> str:
    """Encode a signed JWT carrying the user's id and email.

    Args:
        user_id:        Primary key of the user record.
        email:          The user's login email.
        secret:         HS256 signing key (JWT_SECRET).
        expire_seconds: Token lifetime; 7 days unless overridden.
        now:            Issue time. Defaults to the current UTC time; tests
                        pass a past time to mint already-expired tokens.
    """
    issued = now or datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "email": email,
        "iat": issued,
        "exp": issued + timedelta(seconds=expire_seconds),
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure.

    Expired tokens fail verification inside jose (ExpiredSignatureError is a
    JWTError subclass), so expiry needs no separate check here.
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except JWTError as exc:
        logger.debug("Rejected token: %s", exc)
        return None
    if "id" not in payload:
        return None
    return payload


# ---------------------------------------------------------------------------
# User authentication (constant-time)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Authenticate an email/password login with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash (same cost)

    Returns the User on success, None on any failure.
    """
    user = store.get_by_email(email)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
