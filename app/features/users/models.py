"""
User profile model with ULID primary keys.
"""
from datetime import datetime
from typing import List
import enum
from sqlalchemy import String, Boolean, ForeignKey, JSON, Enum as SQLEnum, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid


class ProfileRole(str, enum.Enum):
    """Role of a user inside their own organization."""
    OWNER = "owner"
    ADMIN = "admin"
    AGENT = "agent"


class User(Base, TimestampMixin):
    """
    User profile for an authenticated identity.

    Profiles are provisioned on first login from the identity provider and are
    never deleted by the admin core. `is_super_admin` grants platform-wide access;
    `super_admin_permissions` is the legacy per-permission list consulted by
    `check_super_admin_permission`.
    """
    __tablename__ = "users"

    # Primary key using ULID (Universally Unique Lexicographically Sortable Identifier)
    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # Appwrite user ID (for linking with Appwrite authentication)
    appwrite_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Tenant membership
    organization_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    role: Mapped[ProfileRole] = mapped_column(
        SQLEnum(ProfileRole, values_callable=lambda e: [m.value for m in e]),
        default=ProfileRole.AGENT,
        nullable=False
    )

    # Status flags
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_super_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    super_admin_permissions: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)

    last_seen_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    organization: Mapped["Organization | None"] = relationship(  # type: ignore
        "Organization",
        back_populates="members",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, super_admin={self.is_super_admin})>"
