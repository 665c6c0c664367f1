"""
Pydantic schemas for organization administration requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr

from app.features.organizations.models import OrganizationStatus, SubscriptionStatus, SubscriptionTier
from app.features.users.schemas import MemberResponse


class OrganizationSuspend(BaseModel):
    """Schema for suspending an organization."""
    reason: str = Field(..., min_length=1, max_length=1000, description="Shown to support staff and kept in the audit trail")


class OrganizationUpdate(BaseModel):
    """Schema for updating organization information (all fields optional)."""
    name: str | None = Field(None, min_length=1, max_length=255)
    subscription_tier: SubscriptionTier | None = None
    billing_email: EmailStr | None = None
    timezone: str | None = Field(None, min_length=1, max_length=64)
    locale: str | None = Field(None, min_length=2, max_length=16)


class OrganizationSummary(BaseModel):
    """Row in the admin organization listing."""
    id: str
    name: str
    slug: str
    status: OrganizationStatus
    subscription_status: SubscriptionStatus
    subscription_tier: SubscriptionTier
    trial_ends_at: datetime | None = None
    created_at: datetime
    last_activity: datetime | None = None
    user_count: int = 0


class OrganizationListResponse(BaseModel):
    """Paginated organization listing."""
    items: list[OrganizationSummary]
    total: int
    page: int
    page_size: int
    pages: int


class OrganizationResponse(BaseModel):
    """Full organization record."""
    id: str
    name: str
    slug: str
    status: OrganizationStatus
    subscription_status: SubscriptionStatus
    subscription_tier: SubscriptionTier
    trial_ends_at: datetime | None = None
    billing_email: str | None = None
    timezone: str
    locale: str
    suspended_at: datetime | None = None
    suspension_reason: str | None = None
    suspended_by: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrganizationMetrics(BaseModel):
    total_users: int
    active_users: int
    last_activity: datetime | None = None


class OrganizationDetails(BaseModel):
    """Organization with its members, as seen by a super admin."""
    organization: OrganizationResponse
    members: list[MemberResponse] = []
    metrics: OrganizationMetrics

    model_config = {"from_attributes": True}


class ActionResult(BaseModel):
    """Outcome of a lifecycle action."""
    success: bool
    message: str
