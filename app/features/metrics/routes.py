"""
Platform metrics routes (super admin only).
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database.engine import get_session_factory
from app.features.users.models import User
from app.features.permissions.dependencies import require_super_admin_user
from app.features.metrics.schemas import PlatformMetrics
from app.features.metrics.service import get_platform_metrics


router = APIRouter(tags=["metrics"])


@router.get("/metrics", response_model=PlatformMetrics)
async def platform_metrics(
    admin: Annotated[User, Depends(require_super_admin_user)],
    session_factory: Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]
):
    """Headline platform counts."""
    metrics = await get_platform_metrics(admin, session_factory=session_factory)
    if metrics is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to collect platform metrics"
        )
    return metrics
