"""
System role assignment management for super admins.
"""
from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.audit.models import AuditTargetType
from app.features.audit.recorder import log_action
from app.features.permissions.dependencies import require_super_admin
from app.features.permissions.models import SystemRole, ProfileSystemRole
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)


async def list_system_roles(db: AsyncSession, admin: Optional[User]) -> Optional[List[SystemRole]]:
    require_super_admin(admin)
    try:
        result = await db.execute(
            select(SystemRole).where(SystemRole.is_active.is_(True)).order_by(SystemRole.name)
        )
    except SQLAlchemyError:
        log.exception("Error fetching system roles")
        return None
    return list(result.scalars().all())


async def get_user_system_roles(
    db: AsyncSession,
    admin: Optional[User],
    user_id: str
) -> Optional[List[ProfileSystemRole]]:
    """
    Every role assignment held by a profile, expiring ones included.

    Returns None if the store could not be read.
    """
    require_super_admin(admin)
    try:
        result = await db.execute(
            select(ProfileSystemRole)
            .where(ProfileSystemRole.profile_id == user_id)
            .order_by(ProfileSystemRole.assigned_at)
        )
    except SQLAlchemyError:
        log.exception("Error fetching system roles for %s", user_id)
        return None
    return list(result.scalars().all())


async def assign_system_role(
    db: AsyncSession,
    admin: Optional[User],
    user_id: str,
    role_id: str,
    expires_at: Optional[datetime] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> bool:
    """
    Grant a system role to a profile.

    Re-assigning a role the profile already holds replaces its expiry. Returns
    False when the profile or role doesn't exist or the store fails.
    """
    admin = require_super_admin(admin)

    try:
        target = await db.get(User, user_id)
        role = await db.get(SystemRole, role_id)
        if target is None or role is None:
            log.warning("Cannot assign role %s to %s: unknown profile or role", role_id, user_id)
            return False

        result = await db.execute(
            select(ProfileSystemRole).where(
                ProfileSystemRole.profile_id == user_id,
                ProfileSystemRole.system_role_id == role_id,
            )
        )
        assignment = result.scalar_one_or_none()
        if assignment is None:
            db.add(ProfileSystemRole(
                profile_id=user_id,
                system_role_id=role_id,
                assigned_by=admin.id,
                expires_at=expires_at,
            ))
        else:
            assignment.assigned_by = admin.id
            assignment.expires_at = expires_at

        await db.commit()
    except SQLAlchemyError:
        log.exception("Error assigning role %s to %s", role_id, user_id)
        await db.rollback()
        return False

    await log_action(
        db,
        admin,
        "assign_system_role",
        AuditTargetType.PROFILE,
        user_id,
        {
            "role_id": role_id,
            "role_name": role.name,
            "expires_at": expires_at.isoformat() if expires_at else None,
        },
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return True


async def revoke_system_role(
    db: AsyncSession,
    admin: Optional[User],
    user_id: str,
    role_id: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> bool:
    """Remove a role assignment. False if there was none to remove."""
    admin = require_super_admin(admin)

    try:
        result = await db.execute(
            delete(ProfileSystemRole).where(
                ProfileSystemRole.profile_id == user_id,
                ProfileSystemRole.system_role_id == role_id,
            )
        )
        await db.commit()
    except SQLAlchemyError:
        log.exception("Error revoking role %s from %s", role_id, user_id)
        await db.rollback()
        return False

    if result.rowcount == 0:
        return False

    await log_action(
        db,
        admin,
        "revoke_system_role",
        AuditTargetType.PROFILE,
        user_id,
        {"role_id": role_id},
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return True
