"""
Permission API routes.

Provides the permission check for the calling user and super admin endpoints for
managing system role assignments.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Request, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.users.dependencies import get_current_user, get_client_ip, get_user_agent
from app.features.users.models import User
from app.features.permissions.schemas import (
    AssignSystemRole,
    PermissionCheckResponse,
    RoleAssignmentResponse,
    SystemRoleResponse,
    UserRolesResponse,
)
from app.features.permissions.dependencies import (
    evaluate_permission,
    permission_summary,
    require_super_admin_user,
)
from app.features.permissions import service
from app.utils import get_logger


log = get_logger(__name__)
router = APIRouter()


# ============================================================================
# Permission Check
# ============================================================================

@router.get("/permissions/check", response_model=PermissionCheckResponse)
async def check_permission(
    permission: str = Query(..., min_length=1, max_length=100),
    resource: Optional[str] = Query(None, max_length=100),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Check whether the calling user holds a permission."""
    decision = await evaluate_permission(db, current_user, permission, resource)
    return PermissionCheckResponse(
        permission=permission,
        resource=resource,
        has_permission=decision.granted,
        reason=decision.reason,
    )


# ============================================================================
# System Role Routes (super admin only)
# ============================================================================

@router.get("/admin/roles", response_model=List[SystemRoleResponse])
async def list_roles(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_super_admin_user)
):
    """List active system roles."""
    roles = await service.list_system_roles(db, admin)
    if roles is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch system roles"
        )
    return roles


@router.get("/admin/users/{user_id}/roles", response_model=UserRolesResponse)
async def get_user_roles(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_super_admin_user)
):
    """Get a profile's role assignments and the permissions they grant."""
    assignments = await service.get_user_system_roles(db, admin, user_id)
    if assignments is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch user roles"
        )

    # Same rule as the evaluator: only assignments without expiry count
    effective = permission_summary([a for a in assignments if a.expires_at is None])
    return UserRolesResponse(
        user_id=user_id,
        assignments=[RoleAssignmentResponse.model_validate(a) for a in assignments],
        effective_permissions=effective,
    )


@router.post("/admin/users/{user_id}/roles", status_code=status.HTTP_201_CREATED)
async def assign_role(
    user_id: str,
    assignment: AssignSystemRole,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_super_admin_user)
):
    """Assign a system role to a profile."""
    assigned = await service.assign_system_role(
        db,
        admin,
        user_id,
        assignment.role_id,
        expires_at=assignment.expires_at,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    if not assigned:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to assign role"
        )
    return {"message": "Role assigned successfully"}


@router.delete("/admin/users/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_role(
    user_id: str,
    role_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_super_admin_user)
):
    """Revoke a system role from a profile."""
    revoked = await service.revoke_system_role(
        db,
        admin,
        user_id,
        role_id,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    if not revoked:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Role assignment not found"
        )
