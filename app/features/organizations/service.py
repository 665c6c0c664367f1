"""
Organization administration for super admins.

Lifecycle transitions go through the store procedures, which are the authority on
whether the target exists. Each successful mutation is followed by exactly one
audit record; failures are logged and reported as False/None.
"""
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import select, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import procedures
from app.features.audit.models import AuditTargetType
from app.features.audit.recorder import log_action
from app.features.organizations.models import Organization, OrganizationStatus
from app.features.permissions.dependencies import require_super_admin
from app.features.users.models import User
from app.utils import get_logger, page_to_offset


log = get_logger(__name__)

# Fields a super admin may change through update_organization
UPDATABLE_FIELDS = ("name", "subscription_tier", "billing_email", "timezone", "locale")
# Of those, the ones that may be cleared with an explicit None
CLEARABLE_FIELDS = ("billing_email",)


async def suspend_organization(
    db: AsyncSession,
    admin: Optional[User],
    organization_id: str,
    reason: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> bool:
    """Suspend an organization and record who did it and why."""
    admin = require_super_admin(admin)

    try:
        suspended = await procedures.suspend_organization(
            db,
            org_id=organization_id,
            reason=reason,
            suspended_by_id=admin.id,
        )
    except SQLAlchemyError:
        log.exception("Error suspending organization %s", organization_id)
        await db.rollback()
        return False

    if not suspended:
        log.error("Error suspending organization %s: not found", organization_id)
        return False

    await log_action(
        db,
        admin,
        "suspend_organization",
        AuditTargetType.ORGANIZATION,
        organization_id,
        {"reason": reason},
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return True


async def reactivate_organization(
    db: AsyncSession,
    admin: Optional[User],
    organization_id: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> bool:
    """Return a suspended organization to active."""
    admin = require_super_admin(admin)

    try:
        reactivated = await procedures.reactivate_organization(
            db,
            org_id=organization_id,
            reactivated_by_id=admin.id,
        )
    except SQLAlchemyError:
        log.exception("Error reactivating organization %s", organization_id)
        await db.rollback()
        return False

    if not reactivated:
        log.error("Error reactivating organization %s: not found", organization_id)
        return False

    await log_action(
        db,
        admin,
        "reactivate_organization",
        AuditTargetType.ORGANIZATION,
        organization_id,
        {},
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return True


async def update_organization(
    db: AsyncSession,
    admin: Optional[User],
    organization_id: str,
    changes: Dict[str, Any],
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Optional[Organization]:
    """
    Apply descriptive changes to an organization.

    Only UPDATABLE_FIELDS present in `changes` are considered and only values
    that differ from the stored ones are written. None clears a field in
    CLEARABLE_FIELDS and is ignored for the rest. Returns the organization, or
    None when it doesn't exist or the store fails. An update with no effective
    change writes no audit record.
    """
    admin = require_super_admin(admin)

    try:
        organization = await db.get(Organization, organization_id)
        if organization is None:
            return None

        changed_fields: Dict[str, Dict[str, Any]] = {}
        for field in UPDATABLE_FIELDS:
            if field not in changes:
                continue
            if changes[field] is None and field not in CLEARABLE_FIELDS:
                continue
            current = getattr(organization, field)
            if changes[field] != current:
                changed_fields[field] = {"from": _plain(current), "to": _plain(changes[field])}
                setattr(organization, field, changes[field])

        if not changed_fields:
            return organization

        await db.commit()
        await db.refresh(organization)
    except SQLAlchemyError:
        log.exception("Error updating organization %s", organization_id)
        await db.rollback()
        return None

    audited = await log_action(
        db,
        admin,
        "update_organization",
        AuditTargetType.ORGANIZATION,
        organization_id,
        {"organization_name": organization.name, "changed_fields": changed_fields},
        ip_address=ip_address,
        user_agent=user_agent,
    )
    if audited is None:
        # a failed audit write rolls the session back and expires loaded rows
        await db.refresh(organization)
    return organization


async def get_organizations_list(
    db: AsyncSession,
    admin: Optional[User],
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
    status: Optional[OrganizationStatus] = None,
) -> Optional[Tuple[List[Dict[str, Any]], int]]:
    """
    Page through organizations, newest first, with member counts.

    `search` matches name or slug case-insensitively. Returns (summaries, total)
    or None on store failure.
    """
    require_super_admin(admin)

    stmt = select(Organization)
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(Organization.name.ilike(pattern), Organization.slug.ilike(pattern)))
    if status:
        stmt = stmt.where(Organization.status == status)

    try:
        total = await db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        result = await db.execute(
            stmt.order_by(Organization.created_at.desc(), Organization.id.desc())
            .offset(page_to_offset(page, limit))
            .limit(limit)
        )
        organizations = result.scalars().all()

        counts: Dict[str, int] = {}
        if organizations:
            count_result = await db.execute(
                select(User.organization_id, func.count(User.id))
                .where(User.organization_id.in_([org.id for org in organizations]))
                .group_by(User.organization_id)
            )
            counts = dict(count_result.all())
    except SQLAlchemyError:
        log.exception("Error fetching organizations list")
        return None

    summaries = [
        {
            "id": org.id,
            "name": org.name,
            "slug": org.slug,
            "status": org.status,
            "subscription_status": org.subscription_status,
            "subscription_tier": org.subscription_tier,
            "trial_ends_at": org.trial_ends_at,
            "created_at": org.created_at,
            "last_activity": org.updated_at,
            "user_count": counts.get(org.id, 0),
        }
        for org in organizations
    ]
    return summaries, total


async def get_organization_details(
    db: AsyncSession,
    admin: Optional[User],
    organization_id: str,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Full view of one organization with its members. Viewing is audited.

    Returns None if the organization doesn't exist or the store fails.
    """
    admin = require_super_admin(admin)

    try:
        organization = await db.get(Organization, organization_id, populate_existing=True)
    except SQLAlchemyError:
        log.exception("Error fetching organization %s", organization_id)
        return None

    if organization is None:
        return None

    members = list(organization.members)
    last_activity = max(
        (m.last_seen_at for m in members if m.last_seen_at is not None),
        default=None,
    )
    details = {
        "organization": organization,
        "members": members,
        "metrics": {
            "total_users": len(members),
            "active_users": sum(1 for m in members if m.is_active),
            "last_activity": last_activity,
        },
    }

    audited = await log_action(
        db,
        admin,
        "view_organization_details",
        AuditTargetType.ORGANIZATION,
        organization_id,
        {"organization_name": organization.name},
        ip_address=ip_address,
        user_agent=user_agent,
    )
    if audited is None:
        await db.refresh(organization)
    return details


def _plain(value: Any) -> Any:
    """Enum members go into audit payloads as their values."""
    return getattr(value, "value", value)
