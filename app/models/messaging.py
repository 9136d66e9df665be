"""Outbound communication delivery records with open/click tracking."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin, utc_now


class EngagementTrackingMixin:
    """Open and click counters shared by tracked deliveries.

    Counters only grow. The first-occurrence timestamps are written once.
    """

    tracking_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        unique=True,
        index=True,
    )
    open_count: Mapped[int | None] = mapped_column(Integer, default=0, nullable=True)
    opened_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    click_count: Mapped[int | None] = mapped_column(Integer, default=0, nullable=True)
    first_clicked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def record_open(self, at: datetime | None = None) -> None:
        """Count an open, stamping the first one."""
        self.open_count = (self.open_count or 0) + 1
        if self.opened_at is None:
            self.opened_at = at or utc_now()

    def record_click(self, at: datetime | None = None) -> None:
        """Count a click, stamping the first one."""
        self.click_count = (self.click_count or 0) + 1
        if self.first_clicked_at is None:
            self.first_clicked_at = at or utc_now()


class ComparisonReportDelivery(Base, TimestampMixin, EngagementTrackingMixin):
    """One send of a scheduled comparison report email."""

    __tablename__ = "comparison_report_deliveries"

    schedule_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False)
    clinic_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)
    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    recipient_emails: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    export_names: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    delivery_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<ComparisonReportDelivery {self.tracking_id} ({self.status})>"


class NotificationHistory(Base, TimestampMixin, EngagementTrackingMixin):
    """Patient notification sent on behalf of a clinician."""

    __tablename__ = "notifications_history"

    user_id: Mapped[str] = mapped_column(UUID(as_uuid=False), nullable=False, index=True)
    clinic_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True)
    episode_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    notification_type: Mapped[str] = mapped_column(String(50), nullable=False)
    patient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    patient_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    patient_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    clinician_name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False)
    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    delivery_details: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<NotificationHistory {self.notification_type} ({self.status})>"
