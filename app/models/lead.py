"""Lead (prospective patient) and contact attempt models."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin, utc_now


class Lead(Base, TimestampMixin):
    """Inbound inquiry captured before an episode exists."""

    __tablename__ = "leads"

    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Routing inputs
    system_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    primary_concern: Mapped[str | None] = mapped_column(Text, nullable=True)
    symptom_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    who_is_this_for: Mapped[str | None] = mapped_column(String(100), nullable=True)
    preferred_contact_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Funnel state
    checkpoint_status: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="lead_created",
    )
    funnel_stage: Mapped[str | None] = mapped_column(String(50), nullable=True, default="lead")
    lead_status: Mapped[str | None] = mapped_column(String(50), nullable=True, default="new")

    # Attribution
    utm_source: Mapped[str | None] = mapped_column(String(255), nullable=True)
    utm_medium: Mapped[str | None] = mapped_column(String(255), nullable=True)
    utm_campaign: Mapped[str | None] = mapped_column(String(255), nullable=True)
    utm_content: Mapped[str | None] = mapped_column(String(255), nullable=True)
    origin_page: Mapped[str | None] = mapped_column(String(500), nullable=True)
    origin_cta: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pillar_origin: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Outreach
    contact_attempt_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_contacted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    contact_attempts: Mapped[list["LeadContactAttempt"]] = relationship(
        "LeadContactAttempt",
        back_populates="lead",
        order_by="LeadContactAttempt.attempt_number",
    )

    def __repr__(self) -> str:
        return f"<Lead {self.id} ({self.checkpoint_status})>"


class LeadContactAttempt(Base, TimestampMixin):
    """A single outreach attempt made by front-desk staff."""

    __tablename__ = "lead_contact_attempts"

    lead_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("leads.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attempt_number: Mapped[int] = mapped_column(Integer, nullable=False)
    method: Mapped[str] = mapped_column(String(30), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    contacted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    created_by: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)

    lead: Mapped["Lead"] = relationship("Lead", back_populates="contact_attempts")

    def __repr__(self) -> str:
        return f"<LeadContactAttempt {self.lead_id} #{self.attempt_number}>"
