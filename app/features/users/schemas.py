"""
Pydantic schemas for user-related responses.
"""
from datetime import datetime
from pydantic import BaseModel

from app.features.users.models import ProfileRole


class UserPublic(BaseModel):
    """Public user information (limited fields)."""
    id: str
    email: str
    full_name: str | None = None

    model_config = {"from_attributes": True}


class UserResponse(UserPublic):
    """Schema for the authenticated user's own profile."""
    organization_id: str | None = None
    role: ProfileRole
    is_active: bool
    is_super_admin: bool
    last_seen_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MemberResponse(UserPublic):
    """Organization member as listed to super admins."""
    role: ProfileRole
    is_active: bool
    last_seen_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
