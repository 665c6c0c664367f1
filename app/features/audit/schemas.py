"""
Pydantic schemas for the super admin audit trail.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict

from app.features.audit.models import AuditSeverity, AuditTargetType


class AuditLogResponse(BaseModel):
    """Schema for audit log response."""
    id: str
    admin_id: str
    actor_email: Optional[str] = None
    action: str
    target_type: AuditTargetType
    target_id: Optional[str] = None
    details: Dict[str, Any] = {}
    severity: AuditSeverity
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    """Schema for paginated audit log list."""
    items: List[AuditLogResponse]
    total: int
    page: int
    page_size: int
    pages: int
