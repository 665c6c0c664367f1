"""
Pydantic schemas for permission checks and system role management.
"""
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator


# ============================================================================
# System Role Schemas
# ============================================================================

class SystemRoleResponse(BaseModel):
    """Schema for system role response."""
    id: str
    name: str
    description: Optional[str] = None
    permissions: Dict[str, List[str]] = {}
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class RoleAssignmentResponse(BaseModel):
    """A role held by a profile."""
    id: str
    profile_id: str
    system_role_id: str
    assigned_by: Optional[str] = None
    assigned_at: datetime
    expires_at: Optional[datetime] = None
    system_role: SystemRoleResponse

    model_config = ConfigDict(from_attributes=True)


class UserRolesResponse(BaseModel):
    """Assignments of one profile plus the permissions they currently confer."""
    user_id: str
    assignments: List[RoleAssignmentResponse] = []
    effective_permissions: Dict[str, List[str]] = {}


class AssignSystemRole(BaseModel):
    """Schema for assigning a system role to a profile."""
    role_id: str = Field(..., min_length=1, description="System role ID")
    expires_at: Optional[datetime] = Field(None, description="Leave empty for a permanent assignment")

    @field_validator("role_id")
    @classmethod
    def strip_role_id(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("role_id must not be blank")
        return v


# ============================================================================
# Permission Check Schemas
# ============================================================================

class PermissionCheckResponse(BaseModel):
    """Schema for permission check response."""
    permission: str
    resource: Optional[str] = None
    has_permission: bool
    reason: Optional[str] = None
