"""
Organization administration routes (super admin only).
"""
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import config
from app.core.database.engine import get_db
from app.features.users.models import User
from app.features.users.dependencies import get_client_ip, get_user_agent
from app.features.permissions.dependencies import require_super_admin_user
from app.features.organizations.models import OrganizationStatus
from app.features.organizations.schemas import (
    ActionResult,
    OrganizationDetails,
    OrganizationListResponse,
    OrganizationResponse,
    OrganizationSuspend,
    OrganizationUpdate,
)
from app.features.organizations import service
from app.utils import page_count


router = APIRouter(tags=["organizations"])


@router.get("/", response_model=OrganizationListResponse)
async def list_organizations(
    admin: Annotated[User, Depends(require_super_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, max_length=255, description="Match against name or slug"),
    status_filter: Optional[OrganizationStatus] = Query(None, alias="status"),
):
    """List organizations, newest first."""
    result = await service.get_organizations_list(
        db, admin, page=page, limit=limit, search=search, status=status_filter
    )
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch organizations"
        )

    items, total = result
    return OrganizationListResponse(
        items=items,
        total=total,
        page=page,
        page_size=limit,
        pages=page_count(total, limit),
    )


@router.get("/{organization_id}", response_model=OrganizationDetails)
async def get_organization(
    organization_id: str,
    request: Request,
    admin: Annotated[User, Depends(require_super_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get an organization with its members."""
    details = await service.get_organization_details(
        db,
        admin,
        organization_id,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    if details is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found"
        )
    return details


@router.patch("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: str,
    update_data: OrganizationUpdate,
    request: Request,
    admin: Annotated[User, Depends(require_super_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update organization information."""
    organization = await service.update_organization(
        db,
        admin,
        organization_id,
        update_data.model_dump(exclude_unset=True),
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    if organization is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found"
        )
    return organization


@router.post("/{organization_id}/suspend", response_model=ActionResult)
async def suspend_organization(
    organization_id: str,
    body: OrganizationSuspend,
    request: Request,
    admin: Annotated[User, Depends(require_super_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Suspend an organization."""
    suspended = await service.suspend_organization(
        db,
        admin,
        organization_id,
        body.reason,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    if not suspended:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to suspend organization"
        )
    return ActionResult(success=True, message="Organization suspended successfully")


@router.post("/{organization_id}/reactivate", response_model=ActionResult)
async def reactivate_organization(
    organization_id: str,
    request: Request,
    admin: Annotated[User, Depends(require_super_admin_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Reactivate a suspended organization."""
    reactivated = await service.reactivate_organization(
        db,
        admin,
        organization_id,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    if not reactivated:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to reactivate organization"
        )
    return ActionResult(success=True, message="Organization reactivated successfully")
