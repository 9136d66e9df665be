"""Staff profile, role and patient account models."""

from datetime import date
from enum import Enum

from sqlalchemy import Date, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin


class AppRole(str, Enum):
    """Roles granted to authenticated users."""

    ADMIN = "admin"
    CLINICIAN = "clinician"
    OWNER = "owner"
    PROFESSIONAL_VERIFIED = "professional_verified"


class Profile(Base, TimestampMixin):
    """Staff profile keyed by the auth user id."""

    __tablename__ = "profiles"

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    clinician_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    npi: Mapped[str | None] = mapped_column(String(20), nullable=True)
    clinic_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("clinic_settings.id", ondelete="SET NULL"),
        nullable=True,
    )

    roles: Mapped[list["UserRole"]] = relationship(
        "UserRole",
        back_populates="profile",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Profile {self.email}>"


class UserRole(Base, TimestampMixin):
    """A single role grant. A user may hold several."""

    __tablename__ = "user_roles"
    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_id_role"),)

    user_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[AppRole] = mapped_column(String(50), nullable=False)

    profile: Mapped["Profile"] = relationship("Profile", back_populates="roles")

    def __repr__(self) -> str:
        return f"<UserRole {self.user_id}:{self.role}>"


class PatientAccount(Base, TimestampMixin):
    """Patient portal account, optionally linked to an auth user."""

    __tablename__ = "patient_accounts"

    user_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        nullable=True,
        unique=True,
        index=True,
    )
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<PatientAccount {self.email}>"
