"""
Audit trail routes (super admin only).
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.users.models import User
from app.features.permissions.dependencies import require_super_admin_user
from app.features.audit.models import AuditTargetType
from app.features.audit.recorder import get_audit_logs
from app.features.audit.schemas import AuditLogListResponse, AuditLogResponse
from app.utils import page_count


router = APIRouter(tags=["audit"])


@router.get("/audit-logs", response_model=AuditLogListResponse)
async def list_audit_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    admin_id: Optional[str] = None,
    action: Optional[str] = None,
    target_type: Optional[AuditTargetType] = None,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_super_admin_user)
):
    """List audit logs with optional filtering, newest first."""
    result = await get_audit_logs(
        db,
        admin,
        page=page,
        limit=limit,
        admin_id=admin_id,
        action=action,
        target_type=target_type.value if target_type else None,
    )
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch audit logs"
        )

    logs, total = result
    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(entry) for entry in logs],
        total=total,
        page=page,
        page_size=limit,
        pages=page_count(total, limit),
    )
