"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in analysis/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/, analysis/, or client/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered doctor account.

    email is the login identifier and is matched exactly (case-sensitive).
    password_hash is the bcrypt hash; it never leaves the auth layer --
    routes serialize users through to_public() or to_summary().

    Optional profile fields are None until the user fills them in at
    registration. Nothing in this package updates a user after creation.
    """

    email: str
    password_hash: str
    id: int | None = None
    full_name: str | None = None
    doctor_id: str | None = None
    hospital_name: str | None = None
    area: str | None = None
    profile_picture: str | None = None
    created_at: str | None = None

    def to_summary(self) -> dict:
        """Short identity shape returned by register and login."""
        return {"id": self.id, "email": self.email, "fullName": self.full_name}

    def to_public(self) -> dict:
        """Every field except password_hash, keyed the way the frontend reads them."""
        return {
            "id": self.id,
            "email": self.email,
            "fullName": self.full_name,
            "doctorId": self.doctor_id,
            "hospitalName": self.hospital_name,
            "area": self.area,
            "profilePicture": self.profile_picture,
            "createdAt": self.created_at,
        }

    def to_profile(self) -> dict:
        """Flattened profile projection. Unset fields become empty strings."""
        return {
            "full_name": self.full_name or "",
            "doctor_id": self.doctor_id or "",
            "email": self.email or "",
            "hospital_name": self.hospital_name or "",
            "area": self.area or "",
            "profile_picture": self.profile_picture or "",
        }
