"""
System settings routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status, Path, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database.engine import get_db
from app.features.users.models import User
from app.features.users.dependencies import get_client_ip, get_user_agent
from app.features.permissions.dependencies import require_super_admin_user
from app.features.settings.schemas import SettingUpdate, SettingsResponse
from app.features.settings import service


router = APIRouter(tags=["settings"])


@router.get("/admin/settings", response_model=SettingsResponse)
async def list_settings(
    admin: Annotated[User, Depends(require_super_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """All settings (super admin only)."""
    settings = await service.get_system_settings(db, admin)
    if settings is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch settings"
        )
    return SettingsResponse(settings=settings)


@router.put("/admin/settings/{key}")
async def update_setting(
    update_data: SettingUpdate,
    request: Request,
    admin: Annotated[User, Depends(require_super_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    key: str = Path(..., min_length=1, max_length=100, pattern=r"^[a-z0-9_.]+$"),
):
    """Create or replace a setting (super admin only)."""
    updated = await service.update_system_setting(
        db,
        admin,
        key,
        update_data.value,
        description=update_data.description,
        category=update_data.category,
        is_public=update_data.is_public,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update setting"
        )
    return {"message": "Setting updated successfully", "key": key}


@router.get("/settings/public", response_model=SettingsResponse)
async def list_public_settings(
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Settings visible without authentication."""
    return SettingsResponse(settings=await service.get_public_settings(db))
