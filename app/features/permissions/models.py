"""
System role and role assignment models for platform-level RBAC.

A system role is a named bundle of permissions scoped per resource:

    {"organizations": ["read", "suspend"], "audit": ["read"]}

Role assignments link a profile to a role, optionally with an expiry. Only
assignments without an expiry are considered by the access evaluator.
"""
from datetime import datetime
from typing import Dict, List
from sqlalchemy import String, ForeignKey, JSON, Text, DateTime, Boolean, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid


class SystemRole(Base, TimestampMixin):
    """
    Named permission bundle, e.g. super_admin, support_admin, billing_admin.
    """
    __tablename__ = "system_roles"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # resource name -> list of permission strings
    permissions: Mapped[Dict[str, List[str]]] = mapped_column(JSON, default=dict, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<SystemRole(id={self.id}, name={self.name!r})>"


class ProfileSystemRole(Base):
    """
    Time-scoped assignment of a system role to a profile.
    """
    __tablename__ = "profile_system_roles"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    profile_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    system_role_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("system_roles.id", ondelete="CASCADE"),
        nullable=False
    )
    assigned_by: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    # NULL means the assignment never expires
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    system_role: Mapped["SystemRole"] = relationship("SystemRole", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("profile_id", "system_role_id", name="uq_profile_system_role"),
    )

    def __repr__(self) -> str:
        return (
            f"<ProfileSystemRole(profile_id={self.profile_id}, role_id={self.system_role_id}, "
            f"expires_at={self.expires_at})>"
        )
