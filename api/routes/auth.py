"""
api/routes/auth.py -- Registration, login, identity, and logout endpoints.

Routes:
  POST /api/auth/register  -- create account; sets session cookie
  POST /api/auth/login     -- email/password login; sets session cookie
  GET  /api/auth/me        -- current user without password hash (requires auth)
  POST /api/auth/logout    -- clears both session cookies; never fails

Which cookie is set depends on the session mode chosen at startup (see
auth/sessions.py). Route handlers do not branch on the mode -- they hand the
response object to the SessionManager, which owns the strategy.

Security:
  POST /login is rate-limited per IP (Settings.login_rate_limit). The limit
  decorator sits under @router so FastAPI registers the checking wrapper.
  Unknown email and wrong password return the same 401 body.
  Cache-Control: no-store on register and login responses.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import limiter
from api.models import LoginRequest, LogoutResponse, MeResponse, PublicUser, RegisterRequest, UserSummaryResponse
from auth.dependencies import get_current_user, get_session_manager
from auth.models import User
from auth.sessions import SessionManager
from core.config import get_settings

logger = logging.getLogger("medai.api")

# Auth policy:
# - POST /api/auth/register: public
# - POST /api/auth/login:    public -- login endpoint must be unauthenticated
# - GET  /api/auth/me:       requires auth (get_current_user)
# - POST /api/auth/logout:   public -- clearing a cookie needs no prior auth
router = APIRouter()


def _login_rate_limit() -> str:
    # Read per request so a changed LOGIN_RATE_LIMIT applies without re-importing.
    return get_settings().login_rate_limit


@router.post("/auth/register", response_model=UserSummaryResponse)
def register(
    body: RegisterRequest,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
) -> dict:
    """Create a doctor account and sign the new user in."""
    summary = sessions.register(
        response,
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        doctor_id=body.doctor_id,
        hospital_name=body.hospital_name,
        area=body.area,
        profile_picture=body.profile_picture,
    )
    response.headers["Cache-Control"] = "no-store"
    return {"user": summary}


@router.post("/auth/login", response_model=UserSummaryResponse)
@limiter.limit(_login_rate_limit)
def login(
    request: Request,
    body: LoginRequest,
    response: Response,
    sessions: SessionManager = Depends(get_session_manager),
) -> dict:
    """Authenticate with email and password; set the session cookie."""
    summary = sessions.login(response, body.email, body.password)
    response.headers["Cache-Control"] = "no-store"
    return {"user": summary}


@router.get("/auth/me", response_model=MeResponse)
async def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return the full user record for the current session, minus the password hash."""
    return MeResponse(user=PublicUser(**current_user.to_public()))


@router.post("/auth/logout", response_model=LogoutResponse)
async def logout(response: Response, sessions: SessionManager = Depends(get_session_manager)) -> dict:
    """Clear both session cookies. Succeeds whether or not a session existed."""
    return sessions.logout(response)
