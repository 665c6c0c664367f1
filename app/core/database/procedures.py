"""
Store-side procedures.

These are the only code paths that change organization lifecycle state or append
to the super admin audit trail. Each one runs its statement and commits, so the
caller's later work (an audit write, for instance) is a separate unit of work.
The procedures do not check who is calling; authorization happens before they are
reached.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.organizations.models import Organization, OrganizationStatus
from app.features.audit.models import SuperAdminAuditLog, AuditSeverity, AuditTargetType


async def suspend_organization(
    db: AsyncSession,
    org_id: str,
    reason: str,
    suspended_by_id: str
) -> bool:
    """
    Mark an organization suspended.

    Returns True when a row was updated, False when the organization does not exist.
    """
    result = await db.execute(
        update(Organization)
        .where(Organization.id == org_id)
        .values(
            status=OrganizationStatus.SUSPENDED,
            suspension_reason=reason,
            suspended_at=datetime.now(timezone.utc),
            suspended_by=suspended_by_id,
        )
    )
    await db.commit()
    return result.rowcount > 0


async def reactivate_organization(
    db: AsyncSession,
    org_id: str,
    reactivated_by_id: str
) -> bool:
    """
    Return an organization to active and clear its suspension fields.

    `reactivated_by_id` is accepted for parity with suspend; the organization row
    has no column for it, the audit record carries the actor.
    """
    result = await db.execute(
        update(Organization)
        .where(Organization.id == org_id)
        .values(
            status=OrganizationStatus.ACTIVE,
            suspension_reason=None,
            suspended_at=None,
            suspended_by=None,
        )
    )
    await db.commit()
    return result.rowcount > 0


async def log_super_admin_action(
    db: AsyncSession,
    admin_user_id: str,
    action_name: str,
    target_type: AuditTargetType | str,
    target_id: Optional[str] = None,
    action_details: Optional[Dict[str, Any]] = None,
    ip_addr: Optional[str] = None,
    user_agent: Optional[str] = None,
    actor_email: Optional[str] = None,
    severity: AuditSeverity | str = AuditSeverity.INFO,
) -> str:
    """
    Insert one audit record and return its id.
    """
    entry = SuperAdminAuditLog(
        admin_id=admin_user_id,
        actor_email=actor_email,
        action=action_name,
        target_type=AuditTargetType(target_type),
        target_id=target_id,
        details=action_details or {},
        severity=AuditSeverity(severity),
        ip_address=ip_addr,
        user_agent=user_agent,
    )
    db.add(entry)
    await db.flush()
    entry_id = entry.id
    await db.commit()
    return entry_id
