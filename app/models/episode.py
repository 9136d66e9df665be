"""Episode of care and outcome score models."""

from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base, TimestampMixin, utc_now


class ScoreType(str, Enum):
    """Point in the episode at which an outcome measure was taken."""

    BASELINE = "baseline"
    FOLLOW_UP = "follow_up"
    DISCHARGE = "discharge"


class Episode(Base, TimestampMixin):
    """A tracked course of patient care."""

    __tablename__ = "episodes"

    user_id: Mapped[str | None] = mapped_column(UUID(as_uuid=False), nullable=True, index=True)
    patient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    episode_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    region: Mapped[str | None] = mapped_column(String(100), nullable=True)
    diagnosis: Mapped[str | None] = mapped_column(Text, nullable=True)
    clinician: Mapped[str | None] = mapped_column(String(200), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    discharge_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    outcome_scores: Mapped[list["OutcomeScore"]] = relationship(
        "OutcomeScore",
        back_populates="episode",
        order_by="OutcomeScore.recorded_at",
    )

    def __repr__(self) -> str:
        return f"<Episode {self.id} ({self.episode_type})>"


class OutcomeScore(Base, TimestampMixin):
    """A single outcome instrument score (NDI, ODI, LEFS, QuickDASH, RPQ)."""

    __tablename__ = "outcome_scores"

    episode_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("episodes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    index_type: Mapped[str] = mapped_column(String(20), nullable=False)
    score_type: Mapped[ScoreType] = mapped_column(String(20), nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    episode: Mapped["Episode"] = relationship("Episode", back_populates="outcome_scores")

    def __repr__(self) -> str:
        return f"<OutcomeScore {self.index_type} {self.score_type}={self.score}>"
