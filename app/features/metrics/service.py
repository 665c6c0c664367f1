"""
Platform-wide counts for the admin dashboard.

Each count is an independent read, so they run concurrently on separate sessions
from the session factory.
"""
import asyncio
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database.engine import AsyncSessionLocal
from app.features.audit.models import SuperAdminAuditLog
from app.features.metrics.schemas import PlatformMetrics
from app.features.organizations.models import Organization, OrganizationStatus
from app.features.permissions.dependencies import require_super_admin
from app.features.users.models import User
from app.utils import get_logger


log = get_logger(__name__)


async def _count(session_factory: async_sessionmaker[AsyncSession], stmt) -> int:
    async with session_factory() as session:
        return await session.scalar(stmt) or 0


async def get_platform_metrics(
    admin: Optional[User],
    session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
) -> Optional[PlatformMetrics]:
    """
    Collect platform counts. Returns None if any of the reads fails.
    """
    require_super_admin(admin)

    now = datetime.now(timezone.utc)
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

    org_count = select(func.count(Organization.id))
    user_count = select(func.count(User.id))

    statements = [
        org_count,
        org_count.where(Organization.status == OrganizationStatus.ACTIVE),
        org_count.where(Organization.status == OrganizationStatus.SUSPENDED),
        user_count,
        user_count.where(User.is_active.is_(True)),
        user_count.where(User.is_super_admin.is_(True)),
        select(func.count(SuperAdminAuditLog.id)).where(SuperAdminAuditLog.created_at >= start_of_day),
    ]

    tasks: list[asyncio.Task] = []
    try:
        for stmt in statements:
            tasks.append(asyncio.create_task(_count(session_factory, stmt)))
        (
            total_orgs,
            active_orgs,
            suspended_orgs,
            total_users,
            active_users,
            super_admins,
            audit_today,
        ) = await asyncio.gather(*tasks)
    except SQLAlchemyError:
        log.exception("Error collecting platform metrics")
        for task in tasks:
            task.cancel()
        # wait for the cancelled reads so their sessions are closed
        await asyncio.gather(*tasks, return_exceptions=True)
        return None

    return PlatformMetrics(
        total_organizations=total_orgs,
        active_organizations=active_orgs,
        suspended_organizations=suspended_orgs,
        total_users=total_users,
        active_users=active_users,
        super_admins=super_admins,
        audit_events_today=audit_today,
        generated_at=now,
    )
