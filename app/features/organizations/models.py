"""
Organization (tenant) model.

Organizations move between lifecycle states only through the store procedures in
`app.core.database.procedures`; everything else here is descriptive data.
"""
from datetime import datetime
import enum
from sqlalchemy import String, Enum as SQLEnum, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, TimestampMixin, generate_ulid


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class OrganizationStatus(str, enum.Enum):
    """Lifecycle status of a tenant."""
    ACTIVE = "active"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"
    PENDING_SETUP = "pending_setup"


class SubscriptionStatus(str, enum.Enum):
    TRIAL = "trial"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    PAST_DUE = "past_due"


class SubscriptionTier(str, enum.Enum):
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class Organization(Base, TimestampMixin):
    """
    Tenant organization with subscription and suspension bookkeeping.
    """
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)

    status: Mapped[OrganizationStatus] = mapped_column(
        SQLEnum(OrganizationStatus, values_callable=_enum_values),
        default=OrganizationStatus.ACTIVE,
        nullable=False,
        index=True
    )

    # Subscription
    subscription_status: Mapped[SubscriptionStatus] = mapped_column(
        SQLEnum(SubscriptionStatus, values_callable=_enum_values),
        default=SubscriptionStatus.TRIAL,
        nullable=False
    )
    subscription_tier: Mapped[SubscriptionTier] = mapped_column(
        SQLEnum(SubscriptionTier, values_callable=_enum_values),
        default=SubscriptionTier.STARTER,
        nullable=False
    )
    trial_ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Billing / locale
    billing_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    timezone: Mapped[str] = mapped_column(String(64), default="UTC", nullable=False)
    locale: Mapped[str] = mapped_column(String(16), default="en", nullable=False)

    # Suspension bookkeeping, written by the suspend/reactivate procedures.
    # suspended_by holds a user id without a FK to keep users<->organizations acyclic.
    suspended_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    suspension_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    suspended_by: Mapped[str | None] = mapped_column(String(26), nullable=True)

    members: Mapped[list["User"]] = relationship(  # type: ignore
        "User",
        back_populates="organization",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, slug={self.slug!r}, status={self.status})>"
