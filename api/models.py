"""
API request and response models for MedAI REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
analysis/models.py, which own the internal domain representation. Route
handlers map between the two.

Field naming follows what the React frontend already sends and reads:
camelCase for auth and analysis payloads, snake_case for /api/profile.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from analysis.models import Analysis

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register.

    email and password are Optional here on purpose: a missing value must
    produce the session layer's 400 "Email and password are required", not
    FastAPI's generic 422 validation envelope.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=255)
    doctor_id: Optional[str] = Field(default=None, max_length=100)
    hospital_name: Optional[str] = Field(default=None, max_length=255)
    area: Optional[str] = Field(default=None, max_length=255)
    profile_picture: Optional[str] = None


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)


# ---------------------------------------------------------------------------
# Auth response models
# ---------------------------------------------------------------------------


class UserSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    fullName: Optional[str] = None


class UserSummaryResponse(BaseModel):
    """Response for register and login."""

    model_config = ConfigDict(frozen=True)

    user: UserSummary


class PublicUser(BaseModel):
    """A user as returned by /api/auth/me. Has no password hash field at all."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str
    fullName: Optional[str] = None
    doctorId: Optional[str] = None
    hospitalName: Optional[str] = None
    area: Optional[str] = None
    profilePicture: Optional[str] = None
    createdAt: Optional[str] = None


class MeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: PublicUser


class LogoutResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool = True


class ProfileResponse(BaseModel):
    """Response for GET /api/profile. Unset fields are empty strings, never null."""

    model_config = ConfigDict(frozen=True)

    full_name: str = ""
    doctor_id: str = ""
    email: str = ""
    hospital_name: str = ""
    area: str = ""
    profile_picture: str = ""


# ---------------------------------------------------------------------------
# Analysis response models
# ---------------------------------------------------------------------------


class CategoryCountsResponse(BaseModel):
    """Response for GET /api/analysis/category-counts."""

    model_config = ConfigDict(frozen=True)

    todayCount: int
    totalCount: int
    cancerCount: int
    neuroCount: int


class AnalysisRecord(BaseModel):
    """One row of GET /api/analysis/history. Serialized with camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    user_email: Optional[str] = None
    patient_name: str
    analysis_type: str
    results: dict[str, Any]
    created_at: str

    @classmethod
    def from_domain(cls, analysis: Analysis) -> "AnalysisRecord":
        """Build an AnalysisRecord from the store's Analysis dataclass."""
        return cls(
            id=analysis.id,
            user_email=analysis.user_email,
            patient_name=analysis.patient_name,
            analysis_type=analysis.analysis_type,
            results=analysis.results,
            created_at=analysis.created_at,
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response."""

    model_config = ConfigDict(frozen=True)

    message: str


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
    session_mode: str
