"""
Append-only audit trail for super admin actions.
"""
from typing import Any, Dict
import enum
from sqlalchemy import String, ForeignKey, JSON, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, CreatedAtMixin, generate_ulid


class AuditTargetType(str, enum.Enum):
    """Kind of entity an audited action was applied to."""
    ORGANIZATION = "organization"
    PROFILE = "profile"
    SYSTEM = "system"
    BILLING = "billing"


class AuditSeverity(str, enum.Enum):
    """Caller-supplied classification of an audited action."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class SuperAdminAuditLog(Base, CreatedAtMixin):
    """
    One immutable record per privileged action.

    Rows are only ever inserted (see `log_super_admin_action`); there is no
    updated_at column and no code path that updates or deletes them.
    """
    __tablename__ = "super_admin_audit_logs"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # Actor
    admin_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    actor_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Action details
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    target_type: Mapped[AuditTargetType] = mapped_column(
        SQLEnum(AuditTargetType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True
    )
    target_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    details: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    severity: Mapped[AuditSeverity] = mapped_column(
        SQLEnum(AuditSeverity, values_callable=lambda e: [m.value for m in e]),
        default=AuditSeverity.INFO,
        nullable=False
    )

    # Client metadata
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<SuperAdminAuditLog(id={self.id}, admin_id={self.admin_id}, action={self.action})>"
