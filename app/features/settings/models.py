"""
Platform-wide key/value settings.
"""
import enum
from sqlalchemy import String, ForeignKey, Text, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, TimestampMixin, generate_ulid


class SettingCategory(str, enum.Enum):
    GENERAL = "general"
    BILLING = "billing"
    LIMITS = "limits"
    FEATURES = "features"
    SECURITY = "security"


class SystemSetting(Base, TimestampMixin):
    """
    A single setting. `value` holds a JSON document as text; callers decode it.
    """
    __tablename__ = "system_settings"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[SettingCategory] = mapped_column(
        SQLEnum(SettingCategory, values_callable=lambda e: [m.value for m in e]),
        default=SettingCategory.GENERAL,
        nullable=False
    )
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    updated_by: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<SystemSetting(key={self.key!r}, category={self.category})>"
