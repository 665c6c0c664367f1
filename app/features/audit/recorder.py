"""
Audit recorder for super admin actions.

Mutating admin operations commit their change first and then call `log_action`
once. The two writes are separate commits: if the audit insert fails the change
stands and `log_action` returns None. Callers must not treat None as a failure
of the operation they already performed.
"""
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import procedures
from app.features.audit.models import SuperAdminAuditLog, AuditSeverity, AuditTargetType
from app.features.permissions.dependencies import require_super_admin
from app.features.users.models import User
from app.utils import get_logger, page_to_offset


log = get_logger(__name__)


async def log_action(
    db: AsyncSession,
    actor: Optional[User],
    action: str,
    target_type: AuditTargetType | str,
    target_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    severity: AuditSeverity | str = AuditSeverity.INFO,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Optional[str]:
    """
    Append one audit record for an action performed by `actor`.

    Args:
        db: Database session
        actor: The acting profile; must be an authenticated super admin
        action: Action name, e.g. "suspend_organization"
        target_type: organization, profile, system or billing
        target_id: Id of the affected entity, if any
        details: Free-form JSON payload
        severity: Caller-supplied classification (default info)
        ip_address: Client address
        user_agent: Client user agent

    Returns:
        The new record id, or None if the insert failed or `target_type` or
        `severity` is not a known value.

    Raises:
        SuperAdminRequired: for anonymous actors and non super admins
    """
    actor = require_super_admin(actor)

    try:
        record_id = await procedures.log_super_admin_action(
            db,
            admin_user_id=actor.id,
            action_name=action,
            target_type=target_type,
            target_id=target_id,
            action_details=details or {},
            ip_addr=ip_address,
            user_agent=user_agent,
            actor_email=actor.email,
            severity=severity,
        )
    except (SQLAlchemyError, ValueError):
        log.error("Failed to log super admin action %s on %s:%s", action, target_type, target_id, exc_info=True)
        await db.rollback()
        return None

    log.info(f"Audit: admin={actor.id} action={action} target={target_type}:{target_id} record={record_id}")
    return record_id


async def get_audit_logs(
    db: AsyncSession,
    admin: Optional[User],
    page: int = 1,
    limit: int = 50,
    admin_id: Optional[str] = None,
    action: Optional[str] = None,
    target_type: Optional[str] = None,
) -> Optional[Tuple[List[SuperAdminAuditLog], int]]:
    """
    Page through the audit trail, newest first.

    Returns (logs, total) or None if the store could not be read. An unknown
    `target_type` matches nothing.
    """
    require_super_admin(admin)

    stmt = select(SuperAdminAuditLog)
    if admin_id:
        stmt = stmt.where(SuperAdminAuditLog.admin_id == admin_id)
    if action:
        stmt = stmt.where(SuperAdminAuditLog.action == action)
    if target_type:
        try:
            stmt = stmt.where(SuperAdminAuditLog.target_type == AuditTargetType(target_type))
        except ValueError:
            # no record can carry an unknown target type
            return [], 0

    try:
        total = await db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        result = await db.execute(
            stmt.order_by(SuperAdminAuditLog.created_at.desc(), SuperAdminAuditLog.id.desc())
            .offset(page_to_offset(page, limit))
            .limit(limit)
        )
        logs = list(result.scalars().all())
    except SQLAlchemyError:
        log.exception("Error fetching audit logs")
        return None

    return logs, total
