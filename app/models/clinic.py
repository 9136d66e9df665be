"""Clinic branding and email template settings."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class ClinicSettings(Base, TimestampMixin):
    """Clinic-wide settings. The registry reads the first row.

    Email templates support ``{{variable}}`` substitution.
    """

    __tablename__ = "clinic_settings"

    clinic_name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        default="Pittsford Performance Care",
    )
    tagline: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    referral_approval_email_subject: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    referral_approval_email_template: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    referral_decline_email_subject: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    referral_decline_email_template: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<ClinicSettings {self.clinic_name}>"
