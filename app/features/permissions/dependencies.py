"""
Access evaluation for platform administration.

Implements:
- Super admin detection (fail-closed)
- Effective permission resolution from the super admin flag plus role assignments
- The legacy per-profile super admin permission list
- FastAPI dependencies for route protection

Every lookup failure is turned into a denial at this boundary. The only exception
that leaves this module on purpose is SuperAdminRequired, which callers must let
propagate: the app turns it into a redirect.
"""
from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Optional
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.users.dependencies import get_optional_user
from app.features.users.models import User
from app.features.permissions.models import ProfileSystemRole
from app.utils import get_logger


log = get_logger(__name__)

WILDCARD_PERMISSION = "*"


class SuperAdminRequired(Exception):
    """
    Raised when a non super admin (or anonymous caller) reaches an admin-only
    operation. Not an error to report: the request is diverted to a
    non-privileged landing page.
    """

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id
        super().__init__(f"Super admin access required (user={user_id})")


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a permission check. Only a successful lookup can grant."""
    granted: bool
    reason: str

    def __bool__(self) -> bool:
        return self.granted


DENIED_NO_USER = AccessDecision(False, "not authenticated")


# ============================================================================
# Lookups
# ============================================================================

async def is_super_admin(db: AsyncSession, user_id: Optional[str]) -> bool:
    """
    Check the super admin flag on a profile.

    Returns False for unknown profiles and on any store error.
    """
    if not user_id:
        return False
    try:
        result = await db.execute(
            select(User.is_super_admin).where(User.id == user_id)
        )
        flag = result.scalar_one_or_none()
    except SQLAlchemyError:
        log.exception("Error checking super admin status for %s", user_id)
        return False
    return bool(flag)


async def get_active_role_assignments(db: AsyncSession, user_id: str) -> List[ProfileSystemRole]:
    """
    Role assignments that count towards a user's permissions.

    Only assignments with no expiry are returned. An assignment carrying any
    expires_at value, including one in the future, is left out.
    """
    result = await db.execute(
        select(ProfileSystemRole)
        .where(
            ProfileSystemRole.profile_id == user_id,
            ProfileSystemRole.expires_at.is_(None),
        )
    )
    return list(result.scalars().all())


def role_grants(role_permissions: Any, permission: str, resource: Optional[str] = None) -> bool:
    """
    Whether a role's permission map contains `permission`.

    With a resource, only that resource's list is searched; without one, every
    resource is.
    """
    if not isinstance(role_permissions, dict):
        return False
    if resource:
        perms = role_permissions.get(resource)
        return isinstance(perms, list) and permission in perms
    return any(
        isinstance(perms, list) and permission in perms
        for perms in role_permissions.values()
    )


# ============================================================================
# Permission Checking
# ============================================================================

async def evaluate_permission(
    db: AsyncSession,
    user: Optional[User],
    permission: str,
    resource: Optional[str] = None
) -> AccessDecision:
    """
    Resolve whether `user` may perform `permission` (optionally on `resource`).

    Super admins are granted everything. Other users need at least one
    non-expiring role assignment whose role lists the permission.
    """
    if user is None:
        return DENIED_NO_USER

    if await is_super_admin(db, user.id):
        return AccessDecision(True, "super admin")

    try:
        assignments = await get_active_role_assignments(db, user.id)
    except SQLAlchemyError:
        log.exception("Error loading role assignments for %s", user.id)
        return AccessDecision(False, "role lookup failed")

    if not assignments:
        return AccessDecision(False, "no role assignments")

    for assignment in assignments:
        role = assignment.system_role
        if role is not None and role_grants(role.permissions, permission, resource):
            log.debug(f"User {user.id} granted {permission} on {resource or '*'} via role {role.name}")
            return AccessDecision(True, f"role {role.name}")

    log.debug(f"User {user.id} denied {permission} on {resource or '*'}")
    return AccessDecision(False, "permission not in any assigned role")


async def has_permission(
    db: AsyncSession,
    user: Optional[User],
    permission: str,
    resource: Optional[str] = None
) -> bool:
    """Boolean form of evaluate_permission."""
    decision = await evaluate_permission(db, user, permission, resource)
    return decision.granted


def require_super_admin(user: Optional[User]) -> User:
    """
    Return `user` if it is a super admin, otherwise divert the request.

    Raises:
        SuperAdminRequired: for anonymous callers and non super admins
    """
    if user is None or not user.is_super_admin:
        log.info("Super admin required, diverting user %s", user.id if user else None)
        raise SuperAdminRequired(user.id if user else None)
    return user


def check_super_admin_permission(user: Optional[User], permission: str) -> bool:
    """
    Legacy per-profile permission list for super admins.

    An empty list, or one containing "*", grants every permission. Non super
    admins never pass, whatever their list holds.
    """
    if user is None or not user.is_super_admin:
        return False

    granted: List[str] = user.super_admin_permissions or []
    if not granted:
        return True

    return permission in granted or WILDCARD_PERMISSION in granted


# ============================================================================
# FastAPI Dependencies
# ============================================================================

async def require_super_admin_user(
    user: Annotated[Optional[User], Depends(get_optional_user)]
) -> User:
    """
    Route dependency gating admin endpoints.

    Usage:
        @router.post("/organizations/{organization_id}/suspend")
        async def suspend(admin: User = Depends(require_super_admin_user)):
            ...
    """
    return require_super_admin(user)


def permission_summary(assignments: List[ProfileSystemRole]) -> Dict[str, List[str]]:
    """Merge the permission maps of several assignments, sorted and de-duplicated."""
    merged: Dict[str, set] = {}
    for assignment in assignments:
        role = assignment.system_role
        if role is None or not isinstance(role.permissions, dict):
            continue
        for resource, perms in role.permissions.items():
            if isinstance(perms, list):
                merged.setdefault(resource, set()).update(perms)
    return {resource: sorted(perms) for resource, perms in sorted(merged.items())}
