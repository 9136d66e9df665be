"""Append-only audit log model."""

from enum import Enum

from sqlalchemy import String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class ActorType(str, Enum):
    """Type of actor performing the action."""

    SYSTEM = "system"
    STAFF = "staff"
    PUBLIC = "public"


class AuditLog(Base, TimestampMixin):
    """Append-only record of a write made through the API.

    Rows are never updated or deleted.
    """

    __tablename__ = "audit_logs"

    actor_type: Mapped[ActorType] = mapped_column(String(50), nullable=False)
    actor_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)

    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    table_name: Mapped[str] = mapped_column(String(100), nullable=False)
    record_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    new_data: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<AuditLog {self.action} by {self.actor_type}:{self.actor_id} "
            f"on {self.table_name}:{self.record_id}>"
        )
