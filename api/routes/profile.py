"""
api/routes/profile.py -- Profile endpoint for the signed-in doctor.

Routes:
  GET /api/profile -- flattened snake_case profile (requires auth)
"""

from fastapi import APIRouter, Depends

from api.models import ProfileResponse
from auth.dependencies import get_current_user
from auth.models import User

# Auth policy:
# - GET /api/profile: requires auth
router = APIRouter()


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: User = Depends(get_current_user)) -> ProfileResponse:
    """Return the current user's profile with empty strings for unset fields."""
    return ProfileResponse(**current_user.to_profile())
