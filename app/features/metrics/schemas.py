"""
Pydantic schemas for platform metrics.
"""
from datetime import datetime
from pydantic import BaseModel, Field


class PlatformMetrics(BaseModel):
    """Headline counts for the admin dashboard."""
    total_organizations: int = 0
    active_organizations: int = 0
    suspended_organizations: int = 0
    total_users: int = 0
    active_users: int = 0
    super_admins: int = 0
    audit_events_today: int = 0
    generated_at: datetime = Field(..., description="When the counts were taken (UTC)")
