"""
Pydantic schemas for system settings.
"""
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from app.features.settings.models import SettingCategory


class SettingUpdate(BaseModel):
    """Schema for writing a setting. `value` may be any JSON document."""
    value: Any = Field(..., description="JSON value to store")
    description: Optional[str] = Field(None, max_length=1000)
    category: Optional[SettingCategory] = None
    is_public: Optional[bool] = None


class SettingsResponse(BaseModel):
    """Decoded settings keyed by setting key."""
    settings: Dict[str, Any]
